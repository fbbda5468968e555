"""GeoFace attendance package.

Feature modules (geo, attendance, verification, checkin, review, ...) hold the
domain logic behind Protocol repositories; Flask controllers are a thin layer
on top, wired together in :mod:`geoface.container`.
"""
