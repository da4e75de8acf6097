import argparse
import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from search_sync_server.config import settings
from search_sync_server.content.api_client import ContentClient
from search_sync_server.db import AsyncSessionLocal, SqlOptionStore, init_models
from search_sync_server.indexing.indexer import Indexer
from search_sync_server.search.client import SearchEngine


def _describe(progress):
    if "page" in progress:
        progress = {"default": progress}
    return ", ".join(
        f"{key}: {p['generation']} page {p['page']} ({p['count']}/{p['total']})"
        for key, p in progress.items()
    )


async def main(fresh: bool, mappings: bool, skip_terms: bool):
    print("Initializing clients...")
    config = settings.indexer_config()
    engine = SearchEngine(config)
    content = ContentClient()
    await init_models()

    try:
        async with AsyncSessionLocal() as session:
            indexer = Indexer(config, engine, content, SqlOptionStore(session))

            if mappings:
                print("Creating index mappings...")
                result = await indexer.create_mappings()
                print(f"Created {len(result['created'])} index(es).")
                for error in result["errors"]:
                    print(f"  failed: {error['index']}: {error['errors']}")

            # One page per step, as the HTTP trigger would do it.
            progress = await indexer.index_posts(fresh=fresh)
            print(_describe(progress))
            while not await indexer.is_finished():
                progress = await indexer.index_posts()
                print(_describe(progress))

            if not skip_terms:
                print("Indexing taxonomy terms...")
                count = await indexer.index_taxonomies()
                print(f"Indexed {count} term(s).")
    finally:
        await engine.close()

    print("Done! Indexes updated.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rebuild the search indexes from the content host.")
    parser.add_argument("--fresh", action="store_true", help="discard persisted progress and start over")
    parser.add_argument("--mappings", action="store_true", help="recreate index mappings first")
    parser.add_argument("--skip-terms", action="store_true", help="do not index taxonomy terms")
    args = parser.parse_args()

    asyncio.run(main(args.fresh, args.mappings, args.skip_terms))
