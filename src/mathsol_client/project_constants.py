"""
Fixed parameters of the Mathsol program and its off-chain companion API.

Seeds and program ids are part of the on-chain contract. Changing them
points the client at different accounts.
"""

from solders.pubkey import Pubkey

PROGRAM_ID = Pubkey.from_string("4Mhnc3XvRMEbKYns84dhtEgPjA9ZATcwgDGb2dNdARmF")

# Well-known programs and sysvars
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
ED25519_PROGRAM_ID = Pubkey.from_string("Ed25519SigVerify111111111111111111111111111")
SYSVAR_RENT_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
SYSVAR_INSTRUCTIONS_ID = Pubkey.from_string("Sysvar1nstructions1111111111111111111111111")

# PDA seeds
COLLECTION_SEED = b"Collection"
TOKEN_SEED = b"Token"
LUCKY_BOX_SEED = b"LuckyBox"
LUCKY_BOX_USER_SEED = b"LuckyBoxUser"
FAIR_LAUNCH_SEED = b"FairLaunch"
FAIR_LAUNCH_VAULT_SEED = b"FairLaunchVault"
FAIR_LAUNCH_USER_SEED = b"FairLaunchUser"
METADATA_SEED = b"metadata"
EDITION_SEED = b"edition"
# Metaplex account key of a Metadata account
METADATA_V1_KEY = 4

# Fair launch user account: discriminator(8) | vec len(4) | draw ids (8 each)
USER_ACCOUNT_HEADER_SIZE = 12
DRAW_ID_SIZE = 8
# Extra slots requested on top of the draws about to be submitted
REALLOC_MARGIN = 10

# Compute unit limits for the metadata-heavy instructions
CREATE_COMPUTE_UNITS = 300_000
MINT_NFT_COMPUTE_UNITS = 400_000

# Pending claims/refunds accumulate until there are more than this many
CLAIM_THRESHOLD = 10

DRAW_ITERATIONS = 1000
DRAW_DELAY_S = 3.0

CLUSTER_ENDPOINTS = {
    "devnet": "https://api.devnet.solana.com",
    "mainnet": "https://api.mainnet-beta.solana.com",
}
DEFAULT_CLUSTER = "devnet"

API_DOMAIN = "https://api.mathsol.pro"
KEY_FILE = "key.json"
