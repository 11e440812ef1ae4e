ARTICLE_SCHEMA = {
    "name": "game_recap_article",
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "required": ["article"],
        "properties": {
            "article": {
                "type": "object",
                "additionalProperties": False,
                "required": [
                    "type",
                    "title",
                    "dek",
                    "byline",
                    "publishedAt",
                    "body",
                    "keyMoments",
                    "tags",
                ],
                "properties": {
                    "type": {"type": "string"},
                    "title": {"type": "string"},
                    "dek": {"type": "string"},
                    "byline": {"type": "string"},
                    "publishedAt": {"type": "string"},
                    "body": {"type": "array", "items": {"type": "string"}},
                    "keyMoments": {"type": "array", "items": {"type": "string"}},
                    "tags": {"type": "array", "items": {"type": "string"}},
                },
            }
        },
    },
}
