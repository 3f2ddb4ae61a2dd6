# payd

Wallet-side services for receiving and sending payments: creating invoices,
deriving payment destinations from an extended private key, building payment
requests and paying another wallet's payment request.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Overview

The package is made of plain data classes and small services. A service is
given its stores and collaborators when it is built; any object with the
methods the service calls can be plugged in.

Models and validation:

- `payd.models`: shared data classes (`User`, `MetaData`, `PayRequest`,
  `PaymentRequestArgs`, `PaymentRequestResponse`, `DPPOutput`, ...), the
  configuration classes `WalletConfig`, `ServerConfig` and `DPPConfig`,
  `DUST_LIMIT` (136 satoshis) and `parse_url`, a strict URL parser.
- `payd.invoices`: `Invoice`, `InvoiceCreate`, `InvoiceArgs` and
  `InvoiceState`, with validation of amount, description and reference
  length, and expiry.
- `payd.payments`: `PaymentCreate` (with validation of its SPV envelope and
  merchant data), `SPVEnvelope`, `ProofCallback` and peer to peer payment
  records.
- `payd.proofs`: `MerkleProof` and `ProofWrapper`, whose `validate` checks a
  merkle proof callback against the expected transaction id.
- `payd.peerchannels`: peer channel records and `PeerChannelHandlerType`.
- `payd.validation`: `Validator`, which runs checks per field and gathers
  every failure, and the checks `min_uint64`, `str_length`,
  `str_length_exact`, `date_after`, `not_empty` and `match_string`.
- `payd.rawtx.tx_id`: parses a raw transaction (standard or extended form)
  and returns its id.
- `payd.keys`: `ExtendedKey` for BIP32 derivation on secp256k1,
  `derive_path` and `derive_number` to map between 64-bit seeds and
  derivation paths, and `p2pkh_script` to build a locking script.
- `payd.logger`: `StdLogger`, backed by `logging`, and `NoopLogger`.
- `payd.errors`: `PaydError`, `ValidationError`, `UnprocessableError`,
  `ClientError`, and the helpers `wrap` and `find_cause`.

Services (`payd.services`):

- `invoice.InvoiceService`: creates, reads and deletes invoices. `create`
  fills in the creation time and default expiry, derives a short id with
  `hashid_encode`, stores the invoice and its destinations inside a store
  transaction, and connects it through a connection service if one was set.
- `destinations.DestinationsService`: derives a unique output script for an
  invoice from the `masterkey` private key and reads destinations back with
  the invoice's terms.
- `payment_request.PaymentRequestService`: builds the payment request a
  payer receives, raising `UnprocessableError` once the invoice has expired.
- `pay.PayService`: fetches another wallet's payment request, enforces the
  optional payout limit, obtains an envelope, sends the payment and records
  any peer channel returned for proof notifications.
- `pay_async.PayChannel`, `connect.ConnectService`, `balance.BalanceService`,
  `owners.OwnerService`, `health.HealthService`: smaller supporting services.

## Examples

```python
from payd.errors import ValidationError
from payd.invoices import InvoiceArgs

try:
    InvoiceArgs(invoice_id="").validate()
except ValidationError as exc:
    print(exc)  # [invoiceID: value must be between 1 and 30 characters]
```

```python
from payd.keys import derive_number, derive_path

path = derive_path(0)        # "2147483648/2147483648/2147483648"
assert derive_number(path) == 0
```

## Errors

Validation failures raise `ValidationError`; its message lists each failing
field in order, for example `[satoshis: value 100 is smaller than minimum 136]`.
Requests that are understood but cannot be processed raise
`UnprocessableError`, rendered as `Unprocessable: <detail>`. Failures from
stores and collaborators are raised as `PaydError` with a message describing
what was being done, followed by the original error, which is kept as the
cause.

## What the package does not do

It holds no storage, HTTP server, network client or command-line program.
Invoice, destination, key, fee quote and peer channel stores, the payment
server client and the builder of signed transaction envelopes are all
supplied by the caller as collaborators of the services.