from typing import TypeAlias

# A TronAddress is the base58check encoded form (34 characters, starting with 'T') of the 21 byte raw address.
# * The first raw byte is the network prefix, 0x41 for all public networks.
# * The remaining 20 bytes are the last 20 bytes of the Keccak-256 digest of the uncompressed public key.
# The checksum is the first 4 bytes of the double SHA-256 of the raw bytes.
TronAddress: TypeAlias = str
