"""Custom exceptions for the lead enrichment service."""


class LinkWiseError(Exception):
    """Base exception for all lead-enrichment errors."""

    pass


class LinkedInError(LinkWiseError):
    """Base exception for LinkedIn-related errors."""

    pass


class LinkedInAuthenticationError(LinkedInError):
    """Raised when LinkedIn login is exhausted. Fatal for the whole run."""

    pass


class NavigationError(LinkedInError):
    """Raised when navigation to a LinkedIn page fails."""

    pass


class ProfileScrapingError(LinkedInError):
    """Raised when profile scraping fails due to page structure changes or timeouts."""

    pass


class EvaluationError(LinkWiseError):
    """Raised when the evaluation service call or its reply is unusable."""

    pass


class LeadStoreError(LinkWiseError):
    """Raised when pushing lead records to the durable store fails."""

    pass


class InputError(LinkWiseError):
    """Raised when the lead input file cannot be read or validated."""

    pass
