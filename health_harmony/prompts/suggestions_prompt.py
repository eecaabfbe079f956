SUGGESTIONS_SYSTEM = """You are a medical information AI that provides autocomplete suggestions.
Do not provide any explanation, just the list of suggestions."""

SUGGESTIONS_USER_TEMPLATE = """Category: "{category}"
Query: "{query}"

Provide a list of up to {limit} relevant and common medical terms for this category.
Only return suggestions that start with the query text.
"""
