import pytest
from sqlalchemy.orm import Session

from learnlang.core.config import Settings
from learnlang.core.errors import CODE_DUPLICATE_PACK, CODE_DUPLICATE_VOCAB, DuplicateKey, Internal, StorageUnavailable
from learnlang.db.database import build_engine
from learnlang.models.packs import Pack, Vocab
from learnlang.services.entities import EntityStore
from learnlang.services.schema_probe import SchemaCapabilities
from learnlang.utils.keys import pack_key, vocab_key


def _pack(pid="p1", name="Kitchen", lang="1", user="u1"):
    return Pack(id=pid, name=name, lang_id=lang, user_id=user)


def _vocab(vid="v1", name="knife", pack_id="p1", translation="chaku"):
    return Vocab(id=vid, image=f"/files/images/{name}.png", name=name, translation=translation, pack_id=pack_id)


def test_languages_are_seeded_and_sorted(store):
    langs = store.list_languages()
    names = [l.name for l in langs]
    assert names == sorted(names)
    assert store.get_language("1").code == "hi"
    assert store.get_language("999") is None


def test_list_languages_degrades_to_empty(tmp_path):
    eng = build_engine(Settings(DATABASE_URL=f"sqlite:///{tmp_path / 'no_tables.db'}"))
    try:
        with Session(eng) as db:
            assert EntityStore(db, SchemaCapabilities.fixed(True)).list_languages() == []
    finally:
        eng.dispose()


def test_unreadable_database_raises_storage_unavailable(tmp_path):
    bogus = tmp_path / "corrupt.db"
    bogus.write_bytes(b"this is not a sqlite database, only garbage" * 64)
    eng = build_engine(Settings(DATABASE_URL=f"sqlite:///{bogus}"))
    try:
        with Session(eng) as db:
            store = EntityStore(db, SchemaCapabilities.fixed(True))
            with pytest.raises(StorageUnavailable) as exc:
                store.list_packs()
            assert exc.value.retryable
            with pytest.raises(StorageUnavailable):
                store.get_pack_by_id("p1")
            with pytest.raises(StorageUnavailable):
                store.list_vocabs("u1", "1")
            # les langues restent le seul listing dégradé
            assert store.list_languages() == []
    finally:
        eng.dispose()


def test_create_pack_then_exists_case_insensitive(store):
    created = store.create_pack(_pack())
    assert created.public is False
    assert store.pack_exists(pack_key("u1", "1", "Kitchen"))
    assert store.pack_exists(pack_key(" U1 ", "1", "KITCHEN"))
    assert not store.pack_exists(pack_key("u2", "1", "Kitchen"))
    assert store.get_pack_id_by_key(pack_key("u1", "1", "kitchen")) == "p1"


def test_invalid_key_never_exists(store):
    store.create_pack(_pack())
    assert store.pack_exists(None) is False
    assert store.vocab_exists(None) is False
    assert store.get_pack_id_by_key(None) is None


def test_duplicate_pack_rejected_by_storage(store):
    store.create_pack(_pack())
    # sans pré-vérification : l'index unique tranche
    with pytest.raises(DuplicateKey) as exc:
        store.create_pack(_pack(pid="p2", name="KITCHEN"))
    assert exc.value.code == CODE_DUPLICATE_PACK
    assert [p.id for p in store.list_packs()] == ["p1"]


def test_same_name_other_language_or_user_allowed(store):
    store.create_pack(_pack())
    store.create_pack(_pack(pid="p2", lang="2"))
    store.create_pack(_pack(pid="p3", user="u2"))
    assert len(store.list_packs()) == 3


def test_pack_with_unknown_language_is_internal_error(store):
    with pytest.raises(Internal):
        store.create_pack(_pack(lang="nope"))


def test_get_pack_by_id(store):
    store.create_pack(_pack())
    assert store.get_pack_by_id("p1").name == "Kitchen"
    assert store.get_pack_by_id("missing") is None
    assert store.get_pack_by_id("") is None


def test_create_vocab_and_duplicates(store):
    store.create_pack(_pack())
    created = store.create_vocab(_vocab())
    assert created.translation == "chaku"
    assert store.vocab_exists(vocab_key("p1", "Knife"))

    with pytest.raises(DuplicateKey) as exc:
        store.create_vocab(_vocab(vid="v2", name="KNIFE"))
    assert exc.value.code == CODE_DUPLICATE_VOCAB


def test_list_vocabs_by_pack_sorted(store):
    store.create_pack(_pack())
    store.create_vocab(_vocab(vid="v1", name="spoon"))
    store.create_vocab(_vocab(vid="v2", name="fork", translation=None))
    vocabs = store.list_vocabs_by_pack("p1")
    assert [v.name for v in vocabs] == ["fork", "spoon"]
    assert vocabs[0].translation is None
    assert store.list_vocabs_by_pack("") == []


def test_list_vocabs_filters_owner_language_and_packs(store):
    store.create_pack(_pack(pid="p1", name="Kitchen"))
    store.create_pack(_pack(pid="p2", name="Garden"))
    store.create_pack(_pack(pid="p3", name="Kitchen", user="u2"))
    store.create_pack(_pack(pid="p4", name="Kitchen", lang="2"))
    store.create_vocab(_vocab(vid="v1", name="knife", pack_id="p1"))
    store.create_vocab(_vocab(vid="v2", name="rake", pack_id="p2"))
    store.create_vocab(_vocab(vid="v3", name="knife", pack_id="p3"))
    store.create_vocab(_vocab(vid="v4", name="knife", pack_id="p4"))

    assert {v.id for v in store.list_vocabs("u1", "1")} == {"v1", "v2"}
    assert [v.id for v in store.list_vocabs("u1", "1", ["p2"])] == ["v2"]
    assert store.list_vocabs("u1", "1", ["p3"]) == []
    assert store.list_vocabs("nobody", "1") == []


def test_reset_keeps_languages(store):
    store.create_pack(_pack())
    store.create_vocab(_vocab())
    store.reset()
    assert store.list_packs() == []
    assert store.list_vocabs("u1", "1") == []
    assert store.list_languages()
