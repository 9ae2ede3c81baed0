from .tag_audit import AuditOutcome, audit_push

__all__ = [
    "AuditOutcome",
    "audit_push",
]
