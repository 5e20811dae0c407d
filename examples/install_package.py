"""
Example: sync the index and download the best version of a package.

Usage:
    python examples/install_package.py net.mamoe:mirai-console
"""

import asyncio
import sys

from mpt_get.core.config import load_config
from mpt_get.models.package import PackageVersion
from mpt_get.models.package_id import PackageID
from mpt_get.observers import TerminalProgressObserver


def main(pid: str):
    config = load_config()

    # Sync the local index working copy; git runs synchronously
    updater = config.updater()
    updater.update()

    package_id = PackageID.parse(pid)
    best = PackageVersion.from_package_id(package_id, updater.index_dir()).best_version()
    if best is None:
        print(f"No resolvable version for {package_id}")
        return

    downloader = config.downloader(TerminalProgressObserver())
    path = asyncio.run(downloader.download(package_id, best.version))

    print(f"\n✅ {package_id} {best.version} saved to: {path}")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "net.mamoe:mirai-console")
