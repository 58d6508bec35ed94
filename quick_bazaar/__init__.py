"""Quick Bazaar Server: HTTP gateway over the Quick Bazaar MongoDB collections."""
