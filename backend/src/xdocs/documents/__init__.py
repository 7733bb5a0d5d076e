"""Document store and the authorization kernel."""
