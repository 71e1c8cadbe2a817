from settings.config import get_settings


class CatalogConfig:
    def __init__(self):
        settings = get_settings()
        self.default_page_size: int = settings.default_page_size
        self.max_page_size: int = settings.max_page_size

        self.code_min_length: int = 3
        self.code_max_length: int = 50
        self.title_min_length: int = 5
        self.title_max_length: int = 200
        self.description_min_length: int = 20

        self.history_default_limit: int = 100


catalog_config = CatalogConfig()


class Constants:
    AUDIT_ENTITY_COMPETENCY = "Competency"

    CATALOG_OWNER_ROLE = "CATALOG_OWNER"

    ACTOR_ID_HEADER = "X-Actor-Id"
    ACTOR_ROLE_HEADER = "X-Actor-Role"
