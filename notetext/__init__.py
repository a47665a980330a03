"""notetext — annotate note text with links, mentions, hashtags and invoices."""

__version__ = "0.1.0"
