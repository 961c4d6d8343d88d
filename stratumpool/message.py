"""Stratum protocol messages: requests, responses, notifications and errors."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Any, Sequence

# Handler (method) names.
AUTHORIZE = "mining.authorize"
SUBSCRIBE = "mining.subscribe"
EXTRA_NONCE_SUBSCRIBE = "mining.extranonce.subscribe"
SET_DIFFICULTY = "mining.set_difficulty"
NOTIFY = "mining.notify"
SUBMIT = "mining.submit"

# Stratum error codes.
UNKNOWN = 20
STALE_JOB = 21
DUPLICATE_SHARE = 22
LOW_DIFFICULTY_SHARE = 23
UNAUTHORIZED_WORKER = 24
NOT_SUBSCRIBED = 25

EXTRA_NONCE2_SIZE = 4

_UINT64_MAX = 2**64 - 1

_STRATUM_DESCRIPTIONS = {
    STALE_JOB: "Stale Job",
    DUPLICATE_SHARE: "Duplicate share",
    LOW_DIFFICULTY_SHARE: "Low difficulty share",
    UNAUTHORIZED_WORKER: "Unauthorized worker",
    NOT_SUBSCRIBED: "Not subscribed",
}


class MessageType(IntEnum):
    """Kinds of stratum message."""

    UNKNOWN = 0
    REQUEST = 1
    RESPONSE = 2
    NOTIFICATION = 3


class ErrorKind(Enum):
    """Categories of message handling failure."""

    PARSE = "parse"
    DECODE = "decode"
    HEADER_INVALID = "header_invalid"
    MINER_UNKNOWN = "miner_unknown"


class MessageError(Exception):
    """Raised when a message cannot be built, parsed or decoded."""

    def __init__(self, kind: ErrorKind, description: str) -> None:
        super().__init__(description)
        self.kind = kind
        self.description = description


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_uint64(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= _UINT64_MAX
    )


def _parse_error(description: str) -> MessageError:
    return MessageError(ErrorKind.PARSE, description)


class StratumError:
    """A stratum error, serialised as ``[code, message, traceback]``."""

    def __init__(self, code: int, error: Any = None,
                 traceback: str | None = None) -> None:
        message = _STRATUM_DESCRIPTIONS.get(code, "Other/Unknown")
        if error is not None:
            message = f"{message}: {error}"
        self.code = code
        self.message = message
        self.traceback = traceback

    def to_json(self) -> str:
        """Return the compact JSON array form of the error."""
        return _compact(self._as_list())

    def _as_list(self) -> list:
        return [self.code, self.message, self.traceback]

    @classmethod
    def from_json(cls, data: str | bytes | Sequence) -> "StratumError":
        """Build an error from its JSON array form (text or decoded list)."""
        if isinstance(data, (str, bytes, bytearray)):
            try:
                data = json.loads(data)
            except ValueError as exc:
                raise _parse_error(f"unable to decode stratum error: {exc}") from exc
        if not isinstance(data, (list, tuple)) or len(data) < 3:
            raise _parse_error("stratum error must be a list of three items")
        code, message, traceback = data[0], data[1], data[2]
        if not _is_number(code) or not isinstance(message, str):
            raise _parse_error("unable to parse stratum error code or message")
        if traceback is not None and not isinstance(traceback, str):
            raise _parse_error("unable to parse stratum error traceback")
        err = cls(int(code) & 0xFFFFFFFF)
        err.message = message
        err.traceback = traceback
        return err

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (f"StratumError(code={self.code!r}, message={self.message!r}, "
                f"traceback={self.traceback!r})")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StratumError):
            return NotImplemented
        return self._as_list() == other._as_list()


@dataclass
class Request:
    """A stratum request; a request without an id is a notification."""

    id: int | None
    method: str
    params: Any = None

    def to_json(self) -> str:
        return _compact({"id": self.id, "method": self.method,
                         "params": self.params})

    def __str__(self) -> str:
        return self.to_json()


@dataclass
class Response:
    """A stratum response."""

    id: int
    error: StratumError | None = None
    result: Any = None

    def to_json(self) -> str:
        payload: dict[str, Any] = {
            "id": self.id,
            "error": None if self.error is None else self.error._as_list(),
        }
        if self.result is not None:
            payload["result"] = self.result
        return _compact(payload)

    def __str__(self) -> str:
        return self.to_json()


def identify_message(data: str | bytes) -> tuple[Request | Response, MessageType]:
    """Decode a raw message and report what kind of message it is."""
    try:
        payload = json.loads(data)
    except (ValueError, TypeError) as exc:
        raise _parse_error(f"unable to decode message: {exc}") from exc
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise _parse_error("message is not a JSON object")

    method = payload.get("method")
    if method is None:
        method = ""
    if not isinstance(method, str):
        raise _parse_error("message method is not a string")

    msg_id = payload.get("id")
    if msg_id is not None and not _is_uint64(msg_id):
        raise _parse_error("message id is not an unsigned integer")

    if method:
        req = Request(msg_id, method, payload.get("params"))
        kind = MessageType.NOTIFICATION if msg_id is None else MessageType.REQUEST
        return req, kind

    raw_error = payload.get("error")
    error = None if raw_error is None else StratumError.from_json(raw_error)
    if not msg_id:
        raise _parse_error("unable to parse message")
    return Response(msg_id, error, payload.get("result")), MessageType.RESPONSE


def _params(req: Request, func: str, what: str) -> Sequence:
    if not isinstance(req.params, (list, tuple)):
        raise _parse_error(f"{func}: unable to parse {what} parameters")
    return req.params


def _item(seq: Sequence, index: int, kind: type | str, desc: str) -> Any:
    try:
        value = seq[index]
    except (IndexError, TypeError):
        raise _parse_error(desc) from None
    if kind == "number":
        ok = _is_number(value)
    else:
        ok = isinstance(value, kind)
    if not ok:
        raise _parse_error(desc)
    return value


def _check_method(req: Request, expected: str, desc: str) -> None:
    if req.method != expected:
        raise _parse_error(desc)


def authorize_request(request_id: int | None, name: str, address: str) -> Request:
    """Create a mining.authorize request."""
    user = f"{address}.{name}" if name and address else f"{address}{name}"
    return Request(request_id, AUTHORIZE, [user, ""])


def parse_authorize_request(req: Request) -> str:
    """Return the username of an authorize request."""
    func = "ParseAuthorizeRequest"
    _check_method(req, AUTHORIZE, f"{func}: request method is not authorize")
    auth = _params(req, func, "authorize")
    if len(auth) < 2:
        raise _parse_error(f"{func}: expected 2 params for authorize request, "
                           f"got {len(auth)}")
    return _item(auth, 0, str, f"{func}: unable to parse username parameter "
                               "for authorize request")


def authorize_response(request_id: int, status: bool,
                       error: StratumError | None) -> Response:
    """Create an authorize response."""
    return Response(request_id, error, status)


def parse_authorize_response(resp: Response) -> tuple[bool, StratumError | None]:
    """Return the status and error of an authorize response."""
    if not isinstance(resp.result, bool):
        raise _parse_error("ParseAuthorizeResponse: unable to parse authorize "
                           "response result parameter")
    return resp.result, resp.error


def subscribe_request(request_id: int | None, user_agent: str,
                      notify_id: str) -> Request:
    """Create a mining.subscribe request."""
    params = [user_agent]
    if notify_id:
        params.append(notify_id)
    return Request(request_id, SUBSCRIBE, params)


def parse_subscribe_request(req: Request) -> tuple[str, str]:
    """Return the miner user agent and notify id of a subscribe request."""
    func = "ParseSubscribeRequest"
    _check_method(req, SUBSCRIBE, f"{func}: request method is not subscribe")
    params = _params(req, func, "subscribe")
    if not params:
        raise _parse_error(f"{func}: no user agent provided for subscribe request")
    miner = _item(params, 0, str, f"{func}: unable to parse miner parameter "
                                  "for subscribe request")
    notify_id = ""
    if len(params) == 2:
        notify_id = _item(params, 1, str, f"{func}: unable to parse id "
                                          "parameter for subscribe request")
    return miner, notify_id


def subscribe_response(request_id: int, notify_id: str, extra_nonce1: str,
                       extra_nonce2_size: int,
                       error: StratumError | None) -> Response:
    """Create a mining.subscribe response."""
    if error is not None:
        return Response(request_id, error, None)
    result = [
        [[SET_DIFFICULTY, notify_id], [NOTIFY, notify_id]],
        extra_nonce1,
        extra_nonce2_size,
    ]
    return Response(request_id, None, result)


def parse_extra_nonce_subscribe_request(req: Request) -> None:
    """Ensure the request is an extranonce subscribe request."""
    _check_method(req, EXTRA_NONCE_SUBSCRIBE,
                  "ParseExtraNonceSubscribeRequest: request method is not "
                  "extra nonce subscribe")


def extra_nonce_subscribe_response(request_id: int) -> Response:
    """Create a mining.extranonce.subscribe response.

    The pool does not support changes to extranonce1, so the result is false.
    """
    return Response(request_id, None, False)


def parse_subscribe_response(resp: Response) -> tuple[str, str, int]:
    """Return the notify id, extranonce1 and extranonce2 size of a response."""
    func = "ParseSubscribeResponse"
    if resp.error is not None:
        raise _parse_error(f"{func}: {resp.error.code}, {resp.error.message}")
    res = resp.result
    if not isinstance(res, (list, tuple)):
        raise _parse_error(f"{func}: unable to parse subscribe response "
                           "result parameter")
    ids = _item(res, 0, (list, tuple), f"{func}: unable to parse id details")

    notify_id = ""
    for entry in ids:
        if ids and isinstance(ids[0], str) and ids[0] == NOTIFY:
            notify_id = _item(ids, 1, str, f"{func}: unable to parse id")
            break
        if isinstance(entry, (list, tuple)):
            name = _item(entry, 0, str, f"{func}: unable to parse id")
            if name != NOTIFY:
                continue
            notify_id = _item(entry, 1, str, f"{func}: unable to parse id")
            break

    extra_nonce1 = _item(res, 1, str, f"{func}: unable to parse subscription "
                                      "ExtraNonce1 parameter")
    nonce2_size = _item(res, 2, "number", f"{func}: unable to parse "
                                          "subscription ExtraNonce2Size parameter")
    return notify_id, extra_nonce1, int(nonce2_size)


def set_difficulty_notification(difficulty: int | float | Fraction) -> Request:
    """Create a mining.set_difficulty notification."""
    return Request(None, SET_DIFFICULTY, [int(float(difficulty))])


def parse_set_difficulty_notification(req: Request) -> int:
    """Return the difficulty carried by a set difficulty notification."""
    func = "ParseSetDifficultyNotification"
    _check_method(req, SET_DIFFICULTY,
                  f"{func}: notification method is not set difficulty")
    params = _params(req, func, "set difficulty")
    return int(_item(params, 0, "number",
                     f"{func}: unable to parse difficulty parameter"))


def work_notification(job_id: str, prev_block: str, gen_tx1: str,
                      block_version: str, n_bits: str, n_time: str,
                      clean_job: bool) -> Request:
    """Create a mining.notify notification.

    The second generation transaction is not used, so it is left blank.
    """
    return Request(None, NOTIFY, [job_id, prev_block, gen_tx1, "", [],
                                  block_version, n_bits, n_time, clean_job])


def parse_work_notification(
        req: Request) -> tuple[str, str, str, str, str, str, bool]:
    """Return job id, prev block, genTx1, version, nBits, nTime and clean flag."""
    func = "ParseWorkNotification"
    _check_method(req, NOTIFY, f"{func}: notification method is not notify")
    params = _params(req, func, "work notification")

    def text(index: int, name: str) -> str:
        return _item(params, index, str, f"{func}: unable to parse work "
                                          f"notification {name} parameter")

    job_id = text(0, "jobID")
    prev_block = text(1, "prevBlock")
    gen_tx1 = text(2, "genTx1")
    block_version = text(5, "blockVersion")
    n_bits = text(6, "nBits")
    n_time = text(7, "nTime")
    clean_job = _item(params, 8, bool, f"{func}: unable to parse work "
                                       "notification cleanJob parameter")
    return job_id, prev_block, gen_tx1, block_version, n_bits, n_time, clean_job


def submit_work_request(request_id: int | None, worker_name: str, job_id: str,
                        extra_nonce2: str, n_time: str, nonce: str) -> Request:
    """Create a mining.submit request."""
    return Request(request_id, SUBMIT,
                   [worker_name, job_id, extra_nonce2, n_time, nonce])


def parse_submit_work_request(req: Request,
                              miner: str) -> tuple[str, str, str, str, str]:
    """Return worker name, job id, extranonce2, nTime and nonce of a submission."""
    func = "ParseSubmitWorkRequest"
    quoted = json.dumps(miner)
    _check_method(req, SUBMIT,
                  f"{func}: invalid method {json.dumps(req.method)} from {quoted}")
    params = _params(req, func, f"submit work") if isinstance(
        req.params, (list, tuple)) else None
    if params is None:
        raise _parse_error(f"{func}: unable to parse submit work parameters "
                           f"from {quoted}")
    if len(params) < 5:
        raise _parse_error(f"{func}: expected 5 submit work parameters, "
                           f"got {len(params)} from {quoted}")
    names = ("workerName", "jobID", "extraNonce2", "nTime", "nonce")
    values = tuple(
        _item(params, index, str,
              f"{func}: unable to parse {name} parameter from {quoted}")
        for index, name in enumerate(names)
    )
    return values  # type: ignore[return-value]


def submit_work_response(request_id: int, status: bool,
                         error: StratumError | None) -> Response:
    """Create a submit response."""
    return Response(request_id, error, status)


def parse_submit_work_response(resp: Response) -> tuple[bool, StratumError | None]:
    """Return the status and error of a submit response."""
    if not isinstance(resp.result, bool):
        raise _parse_error("ParseSubmitWorkResponse: unable to parse result "
                           "parameter")
    return resp.result, resp.error