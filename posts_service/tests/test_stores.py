import pytest
from posts_service.store import coerce_id, usable_filters


def field(record, name):
    return record[name] if isinstance(record, dict) else getattr(record, name)


@pytest.mark.parametrize('value, expected', [
    (7, 7),
    ('7', 7),
    (' 12 ', 12),
    ('abc', None),
    (None, None),
    (True, None),
    ('1.5', None),
])
def test_coerce_id(value, expected):
    assert coerce_id(value) == expected


def test_usable_filters_drops_unknown_keys():
    assert usable_filters({'title': 'x', 'limit': '5'}) == {'title': 'x'}
    assert usable_filters(None) == {}


class TestPostStores:

    @pytest.mark.asyncio
    async def test_insert_assigns_distinct_ids(self, store):
        a = await store.insert({'title': 'a', 'contents': '1'})
        b = await store.insert({'title': 'b', 'contents': '2'})
        assert field(a, 'id') != field(b, 'id')
        assert field(a, 'created_at') is not None

    @pytest.mark.asyncio
    async def test_find_filters(self, store):
        a = await store.insert({'title': 'a', 'contents': 'same'})
        b = await store.insert({'title': 'b', 'contents': 'same'})
        assert [field(p, 'id') for p in await store.find({'contents': 'same'})] == [field(a, 'id'), field(b, 'id')]
        assert [field(p, 'id') for p in await store.find({'id': str(field(b, 'id'))})] == [field(b, 'id')]
        assert await store.find({'id': 'nope'}) == []
        assert len(await store.find({'unknown': 'ignored'})) == 2

    @pytest.mark.asyncio
    async def test_missing_post_vs_post_without_comments(self, store):
        post = await store.insert({'title': 't', 'contents': 'c'})
        assert await store.find_post_comments(field(post, 'id')) == []
        assert await store.find_post_comments(field(post, 'id') + 100) is None
        assert await store.find_post_comments('abc') is None

    @pytest.mark.asyncio
    async def test_insert_comment_accepts_path_style_id(self, store):
        post = await store.insert({'title': 't', 'contents': 'c'})
        comment = await store.insert_comment({'text': 'hey', 'post_id': str(field(post, 'id'))})
        assert field(comment, 'post_id') == field(post, 'id')
        comments = await store.find_post_comments(field(post, 'id'))
        assert [field(c, 'text') for c in comments] == ['hey']

    @pytest.mark.asyncio
    async def test_update(self, store):
        post = await store.insert({'title': 't', 'contents': 'c'})
        updated = await store.update(field(post, 'id'), {'title': 'T2', 'contents': 'C2'})
        assert field(updated, 'title') == 'T2'
        assert field(updated, 'contents') == 'C2'
        assert await store.update(field(post, 'id') + 100, {'title': 'x', 'contents': 'y'}) is None

    @pytest.mark.asyncio
    async def test_remove_takes_comments_along(self, store):
        post = await store.insert({'title': 't', 'contents': 'c'})
        other = await store.insert({'title': 'o', 'contents': 'o'})
        await store.insert_comment({'text': 'gone', 'post_id': field(post, 'id')})
        await store.insert_comment({'text': 'stays', 'post_id': field(other, 'id')})

        removed = await store.remove(field(post, 'id'))
        assert field(removed, 'id') == field(post, 'id')
        assert await store.find_by_id(field(post, 'id')) is None
        assert await store.remove(field(post, 'id')) is None
        assert [field(c, 'text') for c in await store.find_post_comments(field(other, 'id'))] == ['stays']
