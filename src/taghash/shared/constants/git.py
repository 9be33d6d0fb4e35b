"""GitHub API and git executor constants."""


class GitHubConfig:
    """GitHub GraphQL endpoint settings."""

    DEFAULT_HOST = "github.com"
    GRAPHQL_URL = "https://api.github.com/graphql"
    ENTERPRISE_GRAPHQL_URL_TEMPLATE = "https://{host}/api/graphql"
    MAX_PAGE_SIZE = 100
    DEFAULT_TIMEOUT_SECONDS = 30.0
    DEFAULT_MAX_RETRIES = 3
    RETRY_STATUS_CODES = (500, 502, 503, 504)
    TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")
    QUERY_CACHE_NAME = "graphql_cache"

    TAGS_QUERY = """
query TagHash($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    refs(refPrefix: "refs/tags/", first: $first, after: $after) {
      nodes {
        name
        target {
          oid
          commitResourcePath
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
"""


class GitConfig:
    """Local git executor settings."""

    DEFAULT_EXECUTABLE = "git"
    CLONE_URL_TEMPLATE = "https://{host}/{owner}/{name}.git"
    FETCH_STAMP_FILE = "taghash-fetched"
    POLL_INTERVAL_SECONDS = 0.05


class ResolverPhase:
    """Phase names attached to errors and log records."""

    VALIDATION = "validation"
    LOOKUP = "lookup"
    BULK_REFRESH = "bulk_refresh"
    GIT_FALLBACK = "git_fallback"
    STORE = "store"
    PRUNE = "prune"
