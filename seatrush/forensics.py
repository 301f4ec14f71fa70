import hashlib
import json
import hmac
import os
import threading
import time
import uuid


class ForensicLogger:
    """
    Append-only, hash-chained audit trail of a load run.
    Every event extends the chain; sign_run() seals it with an HMAC so the
    audit file can later be checked for tampering or truncation.
    """
    def __init__(self, run_id=None, log_file=None, verbose=False, session_key=None):
        self.run_id = run_id or str(uuid.uuid4())
        self.verbose = verbose
        self.start_time = time.time()
        self.chain_hash = hashlib.sha256(self.run_id.encode()).hexdigest()
        # None keeps the trail in memory only
        self.log_file = log_file
        self.events = []
        # SEAT_WON events arrive from many client threads at once
        self._lock = threading.Lock()

        # Pass a known key to check signatures later; a random one only proves the chain
        self.session_key = session_key or os.urandom(32).hex()

        self.log_event("RUN_START", {"timestamp": self.start_time, "run_id": self.run_id})

    def log_event(self, event_type: str, data: dict):
        """
        Logs an event and updates the hash chain.
        """
        with self._lock:
            entry = {
                "type": event_type,
                "timestamp": time.time(),
                "data": data,
                "prev_hash": self.chain_hash
            }

            entry_str = json.dumps(entry, sort_keys=True)

            # Chain: Hash(Prev_Hash + Current_Entry_Str)
            self.chain_hash = hashlib.sha256((self.chain_hash + entry_str).encode()).hexdigest()

            entry["current_hash"] = self.chain_hash
            self.events.append(entry)

            if self.log_file:
                with open(self.log_file, "a", encoding="utf-8") as f:
                    f.write(json.dumps(entry) + "\n")

            if self.verbose:
                print(f"[AUDIT] {event_type} {json.dumps(data)}")

            return self.chain_hash

    def events_of(self, event_type: str):
        with self._lock:
            return [e for e in self.events if e["type"] == event_type]

    def _sign(self, final_hash: str) -> str:
        integrity_blob = f"{self.run_id}:{self.start_time}:{final_hash}"
        return hmac.new(self.session_key.encode(), integrity_blob.encode(), hashlib.sha256).hexdigest()

    def sign_run(self):
        """
        Generates a final HMAC signature over the chain hash as it stood
        before RUN_COMPLETE, and records both in that last entry.
        """
        signed_hash = self.chain_hash
        signature = self._sign(signed_hash)

        self.log_event("RUN_COMPLETE", {"signature": signature, "final_hash": signed_hash})
        return {
            "run_id": self.run_id,
            "start_time": self.start_time,
            "final_hash": signed_hash,
            "signature": signature,
            "audit_file": self.log_file
        }

    def verify_signature(self, final_hash: str, signature: str) -> bool:
        """Checks a sign_run() result against this logger's key."""
        return hmac.compare_digest(self._sign(final_hash), signature)

    @staticmethod
    def verify_chain(events) -> bool:
        """Recomputes the hash chain over a list of logged entries."""
        if not events:
            return False
        for entry in events:
            body = {k: entry[k] for k in ("type", "timestamp", "data", "prev_hash")}
            expected = hashlib.sha256((entry["prev_hash"] + json.dumps(body, sort_keys=True)).encode()).hexdigest()
            if expected != entry["current_hash"]:
                return False
        for prev, cur in zip(events, events[1:]):
            if cur["prev_hash"] != prev["current_hash"]:
                return False
        return True
