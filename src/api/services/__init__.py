# This file marks the services package for API business logic modules.
# Routers depend on service classes here instead of calling the pricing engine directly.
