"""Core Layer: request-independent types shared by the shell.

Invariants:
    - No module in core/ imports from api/, infrastructure/ or third-party SDKs
    - Core modules do no IO
"""
