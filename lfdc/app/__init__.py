"""
Client core: settings, backend models and services.
"""
