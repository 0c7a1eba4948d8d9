import json

import pytest
from bs4 import BeautifulSoup

from wiki_lib.errors import ParseError
from wiki_lib.parse import (
    extract_description,
    is_content_title,
    parse_category_continue,
    parse_category_members,
    parse_mod_page,
)


def test_parse_category_members_skips_meta_pages(fixtures_dir):
    text = (fixtures_dir / 'category_members.json').read_text()
    assert parse_category_members(text) == ['Cryptid', 'Talisman']


def test_parse_category_members_meta_scenario():
    text = json.dumps({'query': {'categorymembers': [
        {'ns': 0, 'title': 'Foo Mod'},
        {'ns': 14, 'title': 'Category:Meta'},
    ]}})
    assert parse_category_members(text) == ['Foo Mod']


@pytest.mark.parametrize('payload', [
    {},
    {'batchcomplete': ''},
    {'query': {}},
    {'query': {'categorymembers': []}},
])
def test_parse_category_members_tolerates_missing_sections(payload):
    assert parse_category_members(json.dumps(payload)) == []


def test_parse_category_members_rejects_invalid_json():
    with pytest.raises(ParseError):
        parse_category_members('<html>Service unavailable</html>')


def test_parse_category_members_rejects_api_error():
    text = json.dumps({'error': {'code': 'invalidtitle', 'info': 'Bad title'}})
    with pytest.raises(ParseError):
        parse_category_members(text)


@pytest.mark.parametrize('parser,payload', [
    (parse_category_members, {'query': ['oops']}),
    (parse_category_members, {'query': 'oops'}),
    (parse_category_members, {'query': {'categorymembers': {'title': 'Cryptid'}}}),
    (parse_category_continue, {'continue': 'x', 'query': {'categorymembers': []}}),
])
def test_wrongly_shaped_listing_raises_parse_error(parser, payload):
    with pytest.raises(ParseError):
        parser(json.dumps(payload))


def test_parse_category_continue(fixtures_dir):
    text = (fixtures_dir / 'category_members_continue.json').read_text()
    assert parse_category_members(text) == ['Joker Pack']
    assert parse_category_continue(text) == 'page|4a4f4b4552|98'
    assert parse_category_continue((fixtures_dir / 'category_members.json').read_text()) is None


@pytest.mark.parametrize('title,expected', [
    ('Cryptid', True),
    ('Joker Pack: Extended', True),
    ('Category:Joker Mods', False),
    ('Template:Infobox mod', False),
    ('File:Logo.png', False),
    ('User talk:Example', False),
])
def test_is_content_title(title, expected):
    assert is_content_title(title) is expected


def test_parse_mod_page_full(fixtures_dir):
    html = (fixtures_dir / 'mod_page.html').read_text()
    fields = parse_mod_page(html, 'cryptid')

    assert fields.name == 'Cryptid'
    assert fields.author == 'MathIsFun_'
    assert fields.version == '0.5.2'
    assert fields.dependencies == ['Steamodded', 'Talisman']
    # First GitHub link on the page wins
    assert fields.github_url == 'https://github.com/MathIsFun0/Cryptid'


def test_parse_mod_page_description_policy(fixtures_dir):
    html = (fixtures_dir / 'mod_page.html').read_text()
    description = parse_mod_page(html, 'Cryptid').description

    assert description == (
        'An expansive content mod that pushes Balatro to its limits. '
        'Cryptid is a content mod that adds a huge number of new Jokers, consumables and mechanics. '
        'It is designed for players who have already mastered the base game. '
        'Adds over 100 new Jokers to the pool '
        'Includes new Epic and Exotic rarities'
    )
    assert 'stub' not in description
    assert 'See also' not in description
    assert 'brand new deck' not in description


def test_parse_mod_page_falls_back_to_content_block(fixtures_dir):
    html = (fixtures_dir / 'mod_page_stub.html').read_text()
    fields = parse_mod_page(html, 'Fast Hands')

    assert fields.name == 'Fast Hands'
    assert fields.description == 'A small quality of life mod that speeds up the animation of scoring hands.'
    assert fields.author is None
    assert fields.version is None
    assert fields.github_url is None
    assert fields.dependencies == []


def test_parse_mod_page_empty_page():
    fields = parse_mod_page('<html><body></body></html>', 'Mystery Mod')
    assert fields.name == 'Mystery Mod'
    assert fields.description == 'No description available'


def test_description_ignores_url_only_infobox_value():
    html = ('<div class="mw-parser-output"><table class="infobox">'
            '<tr><td>Description</td><td>https://example.com/some/long/path</td></tr></table>'
            '<p>Adds a deck that starts with two extra jokers.</p></div>')
    soup = BeautifulSoup(html, 'html.parser')
    assert extract_description(soup) == 'Adds a deck that starts with two extra jokers.'


def test_description_caps_paragraphs_and_truncates():
    paragraphs = ''.join(f'<p>Paragraph number {i} describes this mod in some detail. ' + 'x' * 150 + '</p>'
                         for i in range(5))
    soup = BeautifulSoup(f'<div class="mw-parser-output">{paragraphs}</div>', 'html.parser')
    description = extract_description(soup)

    assert len(description) == 500
    assert description.endswith('...')
    assert 'Paragraph number 3' not in description
