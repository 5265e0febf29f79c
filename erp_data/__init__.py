"""Resilient data access for ERP module records (remote service, managed store, local store)."""
