from datetime import date
from xml.etree import ElementTree as ET

from fastapi import APIRouter
from fastapi.responses import Response

from app.core.config import settings


router = APIRouter(tags=['seo'])

SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'
BUILD_DATE = date.today()

# (path, changefreq, priority)
STATIC_PAGES = [
    ('', 'daily', 1.0),
    ('/voli-economici/', 'daily', 0.9),
    ('/blog/', 'weekly', 0.8),
    ('/come-funziona/', 'monthly', 0.7),
    ('/premium/', 'monthly', 0.6),
    ('/elite/', 'monthly', 0.6),
]


def sitemap_entries(base_url: str, lastmod: date = BUILD_DATE) -> list[dict]:
    base = base_url.rstrip('/')
    return [
        {'loc': f'{base}{path}', 'lastmod': lastmod.isoformat(), 'changefreq': freq, 'priority': f'{priority:.1f}'}
        for path, freq, priority in STATIC_PAGES
    ]


def render_sitemap(entries: list[dict]) -> bytes:
    urlset = ET.Element('urlset', xmlns=SITEMAP_NS)
    for entry in entries:
        url = ET.SubElement(urlset, 'url')
        for key in ('loc', 'lastmod', 'changefreq', 'priority'):
            ET.SubElement(url, key).text = entry[key]
    return ET.tostring(urlset, encoding='utf-8', xml_declaration=True)


@router.get('/sitemap.xml')
def sitemap():
    return Response(content=render_sitemap(sitemap_entries(settings.site_url)), media_type='application/xml')
