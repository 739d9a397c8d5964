from guidesearch.client.searchbox import HttpSearchFetcher, SearchBox, SearchFetchError, SearchState

__all__ = ["HttpSearchFetcher", "SearchBox", "SearchFetchError", "SearchState"]
