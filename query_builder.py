from typing import Dict, List, Tuple

from validators import LogFilters

Query = Tuple[str, Dict[str, object]]


class ExerciseQueryBuilder:
    """Builds the parameterized statements used to read a user's exercises.

    Each optional clause is paired with the filter attribute that enables it
    and the named parameter it binds, so the clause order is fixed no matter
    which bounds are present.
    """

    LIST_BASE = "SELECT description, duration, date FROM exercise WHERE owner_id = :owner_id"
    COUNT_BASE = "SELECT COUNT(*) FROM exercise WHERE owner_id = :owner_id"
    ORDER = " ORDER BY id"

    PREDICATES: List[Tuple[str, str]] = [
        ("date_from", " AND date > :date_from"),
        ("date_to", " AND date <= :date_to"),
    ]
    LIMIT = ("limit", " LIMIT :limit")

    @staticmethod
    def _apply(
        query: str, params: Dict[str, object], filters: LogFilters, clauses: List[Tuple[str, str]]
    ) -> str:
        for name, clause in clauses:
            value = getattr(filters, name)
            if value is None:
                continue
            query += clause
            params[name] = value
        return query

    def list_query(self, owner_id: int, filters: LogFilters = LogFilters()) -> Query:
        params: Dict[str, object] = {"owner_id": owner_id}
        query = self._apply(self.LIST_BASE, params, filters, self.PREDICATES)
        query += self.ORDER
        query = self._apply(query, params, filters, [self.LIMIT])
        return query + ";", params

    def count_query(self, owner_id: int, filters: LogFilters = LogFilters()) -> Query:
        # never limited: the count reports the full filtered total
        params: Dict[str, object] = {"owner_id": owner_id}
        query = self._apply(self.COUNT_BASE, params, filters, self.PREDICATES)
        return query + ";", params
