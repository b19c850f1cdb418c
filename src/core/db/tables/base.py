from sqlalchemy.orm import DeclarativeBase

# Largest value an INTEGER primary key can hold
MAX_ID = 2**63 - 1


class Base(DeclarativeBase):
    pass
