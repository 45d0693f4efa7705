import json


class GraffitiError(Exception):
    """Base for every failure the submission loop knows how to retry."""

    @property
    def message(self) -> str:
        return str(self)


class RemoteRejected(GraffitiError):
    """The node answered with a 4xx/5xx status."""

    def __init__(self, status_code: int, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        super().__init__(f"ApiError: {text}, Status Code: {status_code}")

    @property
    def message(self) -> str:
        # Node errors are JSON: {"message": ..., "error_code": ..., "vm_error_code": ...}
        try:
            body = json.loads(self.text)
        except ValueError:
            return str(self)
        if isinstance(body, dict) and body.get("message"):
            return body["message"]
        return str(self)


class TransactionTimeout(GraffitiError):
    def __init__(self, tx_hash: str, polls: int) -> None:
        self.tx_hash = tx_hash
        self.polls = polls
        super().__init__(f"Transaction {tx_hash} timed out after {polls} polls")


class TransactionFailed(GraffitiError):
    def __init__(self, tx_hash: str, vm_status: str | None) -> None:
        self.tx_hash = tx_hash
        self.vm_status = vm_status
        super().__init__(f"{vm_status} - {tx_hash}")


class NetworkError(GraffitiError):
    """Could not reach the node (connect, proxy, read timeout, ...)."""
