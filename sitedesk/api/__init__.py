"""HTTP API for sitedesk."""
