"""
STOREFRONT CLIENT

Framework-free shopper side of the marketplace:

- cart/      single-supplier cart state, reducer and CartStore
- storage    durable snapshot backends for the cart
- api        HTTP client for the marketplace API envelope
- checkout   CheckoutOrchestrator (role gate, address check, submission)

Nothing in this package imports Django; it shares only the pure rule
modules (orders.policy, coupons.services.discount, permissions.capabilities)
with the server.
"""
