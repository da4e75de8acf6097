import pytest

from search_sync_server.content.models import CustomField, KindRegistration, TermRef
from search_sync_server.indexing.documents import (
    DocumentBuilderFactory,
    PostDocumentBuilder,
    TermDocumentBuilder,
)
from search_sync_server.indexing.errors import UnsupportedContentKind
from search_sync_server.indexing.mapping import PostMappingBuilder

from conftest import make_post, make_term


def _registration():
    return KindRegistration(
        post_type="post",
        fields=[
            CustomField(name="price", type="number"),
            CustomField(name="secret_note", type="text"),
            CustomField(name="featured", type="true_false"),
            CustomField(
                name="gallery",
                type="repeater",
                sub_fields=[
                    CustomField(name="caption", type="text"),
                    CustomField(name="taken", type="date_picker"),
                ],
            ),
        ],
        taxonomies=["genre"],
    )


def _post(**kwargs):
    return make_post(
        post_id=42,
        fields={
            "price": 12,
            "secret_note": "internal",
            "featured": "1",
            "gallery": [
                {"caption": "Front", "taken": "20230101"},
                {"caption": "Back", "taken": ""},
            ],
        },
        terms={
            "genre": [
                TermRef(term_id=1, slug="jazz", name="Jazz"),
                TermRef(term_id=2, slug="blues", name="Blues"),
            ]
        },
        **kwargs,
    )


def test_post_document(config):
    schema = PostMappingBuilder().build("post", _registration())
    document = PostDocumentBuilder(config, schema).build(_post())

    assert document["type"] == "post"
    assert document["post_title"] == "Post 42"
    assert document["post_title_suggest"] == "Post 42"
    assert document["post_content"] == "Hello world"
    assert document["post_date"] == "2023-10-05T12:30:00"
    assert document["price"] == 12
    assert document["featured"] is True
    assert document["gallery"] == [
        {"caption": "Front", "taken": "2023-01-01"},
        {"caption": "Back", "taken": None},
    ]
    assert document["genre"] == ["jazz", "blues"]
    assert document["genre_name"] == ["Jazz", "Blues"]
    assert document["genre_suggest"] == ["Jazz", "Blues"]


def test_private_fields_only_in_private_document(config):
    config = config.model_copy(update={"private_fields": ["secret_note"]})
    schema = PostMappingBuilder().build("post", _registration())
    builder = PostDocumentBuilder(config, schema)

    assert builder.has_private_fields() is True

    public = builder.build(_post(), include_private=False)
    private = builder.build(_post(), include_private=True)

    assert "secret_note" not in public
    assert private["secret_note"] == "internal"
    assert {k: v for k, v in private.items() if k != "secret_note"} == public


def test_without_private_fields_documents_are_identical(config):
    schema = PostMappingBuilder().build("post", _registration())
    builder = PostDocumentBuilder(config, schema)

    assert builder.has_private_fields() is False
    assert builder.build(_post(), include_private=True) == builder.build(_post())


def test_privacy(config):
    config = config.model_copy(update={"private_post_types": ["memo"]})
    builder = PostDocumentBuilder(config, PostMappingBuilder().build("post"))

    assert builder.is_private(make_post(post_status="private")) is True
    assert builder.is_private(make_post(post_type="memo")) is True
    assert builder.is_private(make_post()) is False


def test_excluded_kind_builds_nothing(config):
    builder = DocumentBuilderFactory(config).create(make_post(post_type="revision"))
    assert builder.build(make_post(post_type="revision")) is None
    assert builder.build(None) is None


def test_ids_and_kinds(config):
    builder = PostDocumentBuilder(config, PostMappingBuilder().build("post"))
    assert builder.get_id(make_post(post_id=5)) == "5"
    assert builder.get_id(make_post(post_id="")) is None
    assert builder.get_kind(make_post(post_type="page")) == "page"


def test_term_document():
    from search_sync_server.indexing.mapping import TermMappingBuilder

    builder = TermDocumentBuilder(TermMappingBuilder().build("category"))
    term = make_term()

    assert builder.build(term) == {"name": "News", "name_suggest": "News", "slug": "news"}
    assert builder.get_id(term) == "7"
    assert builder.get_kind(term) == "category"
    assert builder.is_private(term) is False


def test_factory_selects_by_variant(config):
    factory = DocumentBuilderFactory(config)
    assert isinstance(factory.create(make_post()), PostDocumentBuilder)
    assert isinstance(factory.create(make_term()), TermDocumentBuilder)

    with pytest.raises(UnsupportedContentKind):
        factory.create({"id": 1})
