"""
Service layer: core components (availability, pricing, lifecycle) and the
application services that wrap them in transactions.
"""
