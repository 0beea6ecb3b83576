POST_LIST_FIELDS = """
          id
          title
          slug
          excerpt
          date
          author { node { name } }
          categories { nodes { id databaseId name slug } }
          featuredImage { node { sourceUrl altText } }
"""

ALL_POSTS = (
    """
    query GetAllPosts($first: Int!, $after: String) {
      posts(first: $first, after: $after, where: { status: PUBLISH }) {
        nodes {"""
    + POST_LIST_FIELDS
    + """        }
        pageInfo {
          hasNextPage
          endCursor
        }
      }
    }
"""
)

BLOG_POSTS = (
    """
    query GetPosts($first: Int!) {
      posts(first: $first, where: { status: PUBLISH }) {
        nodes {"""
    + POST_LIST_FIELDS
    + """        }
      }
    }
"""
)

POST_BY_SLUG = """
    query GetPostBySlug($slug: ID!) {
      post(id: $slug, idType: SLUG) {
        id
        title
        slug
        excerpt
        content
        date
        author { node { name } }
        categories { nodes { id databaseId name slug } }
        tags { nodes { name slug } }
        featuredImage { node { sourceUrl altText } }
      }
    }
"""

RELATED_POSTS = """
    query GetRelatedPosts($categoryId: ID!, $idType: CategoryIdType, $first: Int!) {
      category(id: $categoryId, idType: $idType) {
        posts(first: $first, where: { status: PUBLISH }) {
          nodes {
            id
            title
            excerpt
            slug
            date
            featuredImage { node { sourceUrl altText } }
          }
        }
      }
    }
"""
