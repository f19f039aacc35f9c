"""Field-level merge of enriched fragments into a session's order draft.

Rules, per field group:

* customer / driver: a fragment carrying a non-empty name replaces the whole
  sub-object (name plus its enrichment). Anything else leaves it untouched.
* product: name and quantity are merged independently. A non-empty name
  replaces name, id and ``exists``; a quantity replaces the stored one only
  when it is greater than zero.

Merges only ever overwrite; nothing that was set can be cleared again.
"""

from __future__ import annotations

from schemas.recognition import ExtractionFragment, OrderDraft


def merge_fragment(draft: OrderDraft, fragment: ExtractionFragment) -> OrderDraft:
    """Merge ``fragment`` into ``draft`` in place and return ``draft``."""
    if fragment.customer is not None and fragment.customer.name:
        draft.customer = fragment.customer.model_copy()

    incoming = fragment.product
    if incoming is not None:
        product = draft.product
        if incoming.name:
            product.name = incoming.name
            product.id = incoming.id
            product.exists = incoming.exists
        if incoming.quantity is not None and incoming.quantity > 0:
            product.quantity = incoming.quantity

    if fragment.driver is not None and fragment.driver.name:
        draft.driver = fragment.driver.model_copy()

    return draft
