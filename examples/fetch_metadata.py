"""
Example: Single and Batch Metadata Lookups

Demonstrates the typical nftmeta flow against the live Alchemy API.
"""

import asyncio

from dotenv import load_dotenv
load_dotenv()

from nftmeta import NftMetaError, NftMetadataClient

BAYC = "0xbc4ca0eda7647a8ab7c2061c2e118a18a936f13d"


async def main():
    """
    Basic example showing:
    1. Initialize client
    2. Fetch one token in full mode
    3. Fetch a batch (second call is served from cache)
    """
    print("=== nftmeta Example ===\n")

    # Reads ALCHEMY_API_KEY from environment
    async with NftMetadataClient() as client:
        try:
            nft = await client.get_metadata(1, BAYC, "1", {"mode": "full"})
        except NftMetaError as e:
            print(f"Lookup failed: {e.to_dict()}")
            return

        print(f"Name: {nft['name']}")
        print(f"Image: {nft['image']['url']}")
        print(f"Owners: {len(nft['owners'])}")

        body = {
            "chainId": 1,
            "tokens": [{"contract": BAYC, "tokenId": str(i)} for i in range(1, 4)],
        }
        for attempt in (1, 2):
            batch = await client.handle_batch(body)
            names = [r["name"] for r in batch["results"]]
            print(f"Batch #{attempt}: {names}")

        print(f"\nHealth: {await client.health()}")


if __name__ == "__main__":
    asyncio.run(main())
