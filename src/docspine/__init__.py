"""docspine -- data-access primitives for time-partitioned document stores.

Manifesto:
    A document store partitioned into daily/monthly/yearly indices needs
    two things from its data-access layer that the store client does not
    provide: documents must be addressed by an identity derived from the
    entity (so rewrites overwrite instead of duplicating), and time-ranged
    reads must target exactly the indices the range touches (and no more).

Architecture::

    core/        errors, structured logging, settings
    identity/    identity declarations → EntityTypeMetadata → primary/routing keys
    indexing/    granularity → period buckets → grouped index selectors
    store/       HTTP client, client registry, DocumentRepository facade
    cli/         ``docspine select | partition | index-name``

Quick start::

    from docspine import Granularity, id_field, routing_field, entity_keys, selector_string

    class Order(BaseModel):
        __identity__ = (id_field("shop_id"), id_field("order_no", sequence=1), routing_field("shop_id"))
        shop_id: str
        order_no: int

    entity_keys(Order(shop_id="s1", order_no=42))   # EntityKeys('s1-42', 's1')
    selector_string("orders_", start, end, Granularity.DAILY)
"""

from docspine.core.errors import (
    ConfigurationError,
    DocSpineError,
    IncompleteIdentityError,
    InvalidRangeError,
    UnsupportedGranularityError,
)
from docspine.identity import (
    EntityTypeMetadata,
    build_primary_key,
    build_routing_key,
    entity_keys,
    id_field,
    register_identity,
    resolve_identity_spec,
    routing_field,
)
from docspine.indexing import (
    Granularity,
    IndexSelector,
    PeriodBucket,
    compress,
    partition,
    partition_and_select,
    period_index_name,
    select_indices,
    selector_string,
)

__version__ = "0.3.0"

__all__ = [
    "ConfigurationError",
    "DocSpineError",
    "EntityTypeMetadata",
    "Granularity",
    "IncompleteIdentityError",
    "IndexSelector",
    "InvalidRangeError",
    "PeriodBucket",
    "UnsupportedGranularityError",
    "build_primary_key",
    "build_routing_key",
    "compress",
    "entity_keys",
    "id_field",
    "partition",
    "partition_and_select",
    "period_index_name",
    "register_identity",
    "resolve_identity_spec",
    "routing_field",
    "select_indices",
    "selector_string",
]
