"""NFC result delivery: pending result, card tap and the outbound POST."""

from .submitter import PendingSubmission, RemoteSubmitter, ServerConfig

__all__ = ['PendingSubmission', 'RemoteSubmitter', 'ServerConfig']
