"""
Detección de drift (diferencias entre estado deseado y real).

El core solo define la noción de "diff"; la obtención del estado real
la implementan los providers mediante ProviderContract.drift().
"""

from typing import List

from warren.core.runtime.state import StateDiff


def merge_diffs(diff_lists: List[List[StateDiff]]) -> List[StateDiff]:
    """Combina listas de diffs de varios recursos y devuelve una sola lista."""
    out: List[StateDiff] = []
    seen: set = set()
    for lst in diff_lists:
        for d in lst:
            key = (d.resource_id, d.field)
            if key not in seen:
                seen.add(key)
                out.append(d)
    return out
