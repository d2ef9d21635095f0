"""Click commands registered on the ``ghexpr`` group."""
