from sqlalchemy import BigInteger, Integer, String

# Use BigInteger by default, with a SQLite-safe Integer variant for autoincrement PKs.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

# Base-unit amounts, ticket numbers and millisecond timestamps.
AMOUNT_TYPE = BigInteger

# Wallet identities and ledger addresses.
IDENTITY_TYPE = String(128)
