"""
Ledger adapters implementing the LedgerGateway / IdentityProvider ports.

- evm.py: web3.py adapter for the deployed task contract
- offline.py: in-memory ledger for demos and tests
"""
