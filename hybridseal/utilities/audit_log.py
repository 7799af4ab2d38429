#!/usr/bin/env python3
# -*- coding: utf-8 -*-


from datetime import datetime, timezone
import json
import os
import sys
import typing
import threading

_AUDIT_FILE = os.path.join(os.path.dirname(__file__), "audit.log")


#####################################################################################################################################################################

"""
    Provides persistent structured audit logging for HybridSeal.
    Records must never carry key material, plaintext, or tokens.
"""
class AuditLog:

    def __init__(self, path: typing.Optional[str] = None):
        self._lock = threading.RLock()
        self._path = path or _AUDIT_FILE


    @property
    def path(self) -> str:
        return self._path


    def event(self, **kv: typing.Any):

        # Construct ISO8601Z timestamp
        ts = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

        # Append timestamp to event
        record = {"timestamp": ts}
        record.update(kv)

        with self._lock:
            try:
                with open(self._path, "a", encoding="utf-8") as f:
                    json.dump(record, f, ensure_ascii=False, default=str)
                    f.write("\n")

            except OSError as e:
                print(f"Audit log write error: {e}", file=sys.stderr)
