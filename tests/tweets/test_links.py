from kyusu.tweets.links import render_link, resolve_shortened_links, strip_media_url


def test_short_links_become_anchors():
    text, has_link = resolve_shortened_links(
        "Read https://t.co/abc and https://t.co/def",
        [
            {"url": "https://t.co/abc", "expanded_url": "https://example.com/a"},
            {"url": "https://t.co/def", "expanded_url": "https://example.com/b"},
        ],
    )
    assert has_link
    assert text == ('Read <a href="https://example.com/a">https://example.com/a</a> and '
                    '<a href="https://example.com/b">https://example.com/b</a>')


def test_every_occurrence_is_replaced():
    text, _ = resolve_shortened_links(
        "https://t.co/abc https://t.co/abc",
        [{"url": "https://t.co/abc", "expanded_url": "https://x.com"}],
    )
    assert text.count('href="https://x.com"') == 2


def test_retweets_are_left_verbatim():
    original = "RT @someone: look https://t.co/xyz"
    text, has_link = resolve_shortened_links(
        original, [{"url": "https://t.co/xyz", "expanded_url": "https://example.org"}]
    )
    assert text == original
    assert not has_link


def test_unmatched_entities_do_not_flag_links():
    text, has_link = resolve_shortened_links(
        "no links here", [{"url": "https://t.co/zzz", "expanded_url": "https://example.org"}]
    )
    assert text == "no links here"
    assert not has_link


def test_expanded_url_is_escaped():
    link = render_link('https://example.com/?a=1&b="2"')
    assert link == ('<a href="https://example.com/?a=1&amp;b=&quot;2&quot;">'
                    'https://example.com/?a=1&amp;b=&quot;2&quot;</a>')


def test_strip_first_media_url():
    entities = [{"url": "https://t.co/img"}, {"url": "https://t.co/other"}]
    assert strip_media_url("Look https://t.co/img", entities) == "Look"
    assert strip_media_url("Look", []) == "Look"
