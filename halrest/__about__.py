__version__ = "1.0.0"
__description__ = "halrest : hypermedia (HAL) REST api for relational databases with Flask and SqlAlchemy"
