from .row_store import PARENT_KEY, RowStore, SqlAlchemyRowStore
