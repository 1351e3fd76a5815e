"""Table definition for stored objects."""

from typing import Optional

from sqlalchemy import BigInteger, Column, LargeBinary, MetaData, String, Table


def object_table(store_name: str, metadata: Optional[MetaData] = None) -> Table:
    """
    Build the keyed table holding stored objects.

    The table name comes from configuration, so each store instance gets its
    own MetaData unless one is passed in.
    """
    return Table(
        store_name,
        metadata if metadata is not None else MetaData(),
        Column("id", String, primary_key=True),
        Column("name", String, nullable=False),
        Column("mime_type", String, nullable=False, default=""),
        Column("size", BigInteger, nullable=False),
        Column("last_modified", BigInteger, nullable=False),
        Column("payload", LargeBinary, nullable=False),
    )
