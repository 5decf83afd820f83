from storeadmin.db import Base, engine


def init_db() -> None:
    """Create all tables in the database."""
    # Import models so they register with Base.metadata.
    import storeadmin.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


if __name__ == "__main__":
    init_db()
