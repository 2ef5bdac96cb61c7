"""Full-text index DDL for dictionary words."""

from sqlalchemy import DDL

# FTS5 table over headword values, phonetic form and glosses. unicode61 with
# remove_diacritics makes matching case- and diacritic-insensitive; M* keeps
# Indic vowel signs and viramas inside tokens.
CREATE_DICTIONARY_FTS = DDL("""
CREATE VIRTUAL TABLE IF NOT EXISTS dictionary_word_fts USING fts5(
    word_id UNINDEXED,
    words,
    phonetic,
    description,
    tokenize="unicode61 remove_diacritics 2 categories 'L* N* Co M*'"
)
""")

# Column weights for bm25(): word_id, words, phonetic, description
FTS_BM25_WEIGHTS = "0.0, 10.0, 5.0, 1.0"

_FTS_ROW_VALUES = """
        new.id,
        (SELECT group_concat(json_extract(value, '$.value'), ' ') FROM json_each(new.word)),
        new.phonetic,
        (SELECT group_concat(json_extract(value, '$.value'), ' ') FROM json_each(new.description))
"""

CREATE_DICTIONARY_FTS_INSERT_TRIGGER = DDL(f"""
CREATE TRIGGER IF NOT EXISTS dictionary_word_fts_insert AFTER INSERT ON dictionary_word
BEGIN
    INSERT INTO dictionary_word_fts (word_id, words, phonetic, description)
    VALUES ({_FTS_ROW_VALUES});
END
""")

CREATE_DICTIONARY_FTS_UPDATE_TRIGGER = DDL(f"""
CREATE TRIGGER IF NOT EXISTS dictionary_word_fts_update AFTER UPDATE ON dictionary_word
BEGIN
    DELETE FROM dictionary_word_fts WHERE word_id = old.id;
    INSERT INTO dictionary_word_fts (word_id, words, phonetic, description)
    VALUES ({_FTS_ROW_VALUES});
END
""")

CREATE_DICTIONARY_FTS_DELETE_TRIGGER = DDL("""
CREATE TRIGGER IF NOT EXISTS dictionary_word_fts_delete AFTER DELETE ON dictionary_word
BEGIN
    DELETE FROM dictionary_word_fts WHERE word_id = old.id;
END
""")

DICTIONARY_FTS_STATEMENTS = [
    CREATE_DICTIONARY_FTS,
    CREATE_DICTIONARY_FTS_INSERT_TRIGGER,
    CREATE_DICTIONARY_FTS_UPDATE_TRIGGER,
    CREATE_DICTIONARY_FTS_DELETE_TRIGGER,
]
