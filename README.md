# stratumpool

Building blocks for a stratum mining pool. The package covers protocol
messages, block header assembly, mining client identification, per-host
request rate limiting, and the records a pool keeps about jobs, hash rates
and payments. It needs only the Python standard library.

## Installation

```
pip install stratumpool
```

To run the test suite:

```
pip install "stratumpool[test]"
pytest
```

## Stratum messages

`stratumpool.message` builds and parses the JSON messages exchanged with
mining clients.

```python
from stratumpool.message import (
    identify_message,
    subscribe_request,
    parse_subscribe_request,
    StratumError,
)

req = subscribe_request(1, "cpuminer/1.0.0", "")
msg, kind = identify_message(req.to_json())       # kind is MessageType.REQUEST
miner, notify_id = parse_subscribe_request(msg)   # ("cpuminer/1.0.0", "")

err = StratumError.from_json('[22,"Duplicate share",null]')
print(err.to_json())                              # [22,"Duplicate share",null]
```

`identify_message` decodes raw JSON into a `Request` or a `Response` and
reports a `MessageType`. A request that has no id counts as a notification.

Each message has a builder and a matching parser:

- authorization: `authorize_request`, `parse_authorize_request`,
  `authorize_response`, `parse_authorize_response`
- subscription: `subscribe_request`, `parse_subscribe_request`,
  `subscribe_response`, `parse_subscribe_response`,
  `parse_extra_nonce_subscribe_request`, `extra_nonce_subscribe_response`
- difficulty updates: `set_difficulty_notification`,
  `parse_set_difficulty_notification`
- work notifications: `work_notification`, `parse_work_notification`
- share submission: `submit_work_request`, `parse_submit_work_request`,
  `submit_work_response`, `parse_submit_work_response`

A malformed message raises `MessageError`. Its `kind` attribute holds an
`ErrorKind`.

## Block headers

`stratumpool.header.BlockHeader` is the 180-byte block header. It has
`from_bytes` and `to_bytes`. Two functions assemble headers from hex strings:

- `generate_block_header` builds a header from the parts of a work
  notification and a client's extranonce1.
- `generate_solved_block_header` builds the solved header of a submission
  from its job's header.

## Mining clients

`stratumpool.minerid.identify_mining_clients` maps a user agent to the mining
clients the pool supports. For example, `decred-gominer/2.1.0` maps to
`["gominer"]`. An unsupported agent raises `MessageError`.

`parse_user_agent` splits a `name/semver` string into a `ParsedUserAgent`.
`matches_user_agent_max_minor` builds a matcher that accepts a client name
with an exact major version and a maximum minor version.

## Rate limiting

```python
from stratumpool.limiter import RateLimiter, ClientType

limiter = RateLimiter()
if limiter.within_limit("127.0.0.1", ClientType.POOL):
    ...
```

Each address gets a `TokenBucket` on its first request:

| Client type | Refill rate | Burst |
|-------------|-------------|-------|
| Pool | 5 tokens per second | 5 |
| GUI | 3 tokens per second | 7 |

An unknown client type is never within limit. `remove_limiter` forgets an
address.

## Records

- `stratumpool.job`: `Job` and `new_job`. Job ids are built from the block
  height and the creation time.
- `stratumpool.hashdata`: `HashData`, `hash_data_id` and `new_hash_data`
  record each client's hash rate.
- `stratumpool.payment`: `Payment`, `PaymentSource`, `payment_id` and
  `new_payment`. Amounts are in atoms.

## What this package does not do

This package does not listen for miner connections and has no command to run.
It does not talk to a node or a wallet, and it does not store jobs, hash data
or payments anywhere. It also does not compute or send payouts. The records
above are plain in-memory values for an application to keep as it sees fit.