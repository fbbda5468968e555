"""Example: use the service layer directly (no Flask).

Prints the admin review table with distance and lateness derived from the
current school settings.
"""

import importlib

from geoface.config import get_settings_module
from geoface.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)
    for row in container.review_service.list_rows()[:5]:
        print(row.to_dict())


if __name__ == "__main__":
    main()
