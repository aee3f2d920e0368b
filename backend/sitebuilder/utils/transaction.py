from contextlib import contextmanager


@contextmanager
def transactional(engine):
    """Context manager yielding a connection inside one database transaction."""
    with engine.connect() as conn:
        trans = conn.begin()
        try:
            yield conn
            trans.commit()
        except Exception:
            trans.rollback()
            raise
