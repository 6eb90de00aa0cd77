"""Fill extraction gaps from the curated node catalog."""

from loguru import logger

from schema_sync.schema.models import NodeDescriptor, PropertyDescriptor, SchemaDocument, UNKNOWN_TYPE
from schema_sync.schema.vocabulary import KNOWN_NODES


def add_known_nodes(schema: SchemaDocument) -> list[str]:
    """Insert catalog nodes that extraction did not find.

    Existing nodes are never touched, so running this on an already augmented
    schema changes nothing.

    Returns:
        Names of the nodes that were added, in catalog order.
    """
    added: list[str] = []
    for name, known in KNOWN_NODES.items():
        if name in schema.nodes:
            continue
        schema.nodes[name] = NodeDescriptor(
            description=known.description,
            properties={prop: PropertyDescriptor(type=UNKNOWN_TYPE) for prop in known.properties},
        )
        added.append(name)

    if added:
        logger.debug(f"Added {len(added)} known nodes missing from extraction: {added}")
    return added
