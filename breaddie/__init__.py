"""
Application package for the Breaddie backend.

It exposes subpackages for API routers, hosted-backend clients, core
utilities, domain models, repositories and the service layer.
"""
