"""
Store Dash inventory and order dashboard core.

Loads Product and Order snapshots from the hosted store, derives the
dashboard views and dispatches mutating commands to the automation
webhooks.
"""
__version__ = "0.1.0"
