"""
Service layer for the audit log.

Holds the diff engine, storage normalization and the failure-isolated
recorder used by every state-changing operation.
"""
