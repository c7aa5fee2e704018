import pytest
import requests

from readeasy import ApiConfig, EpubSelection, SelectionError, UpstreamError, combine_epubs, fetch_api_config, format_file_size


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b'', text=''):
        self.status_code = status_code
        self._json = json_data
        self.content = content
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError('no json')
        return self._json


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    def _answer(self, method, url, **kwargs):
        if method == 'post':
            kwargs['files'] = [(field, (name, fh.read(), mime)) for field, (name, fh, mime) in kwargs['files']]
        self.calls.append((method, url, kwargs))
        if self.exc:
            raise self.exc
        return self.response

    def get(self, url, **kwargs):
        return self._answer('get', url, **kwargs)

    def post(self, url, **kwargs):
        return self._answer('post', url, **kwargs)


def _sizes(mapping):
    return lambda path: mapping.get(path, 100)


def test_selection_filters_and_labels():
    sel = EpubSelection(size_fn=_sizes({}))
    assert sel.button_label == 'Combine EPUBs'
    sel.add(['a.EPUB', 'notes.txt'])
    assert sel.files == ['a.EPUB']
    assert not sel.ready
    assert sel.button_label == 'Add at least 1 more EPUB'
    sel.add(['b.epub'])
    assert sel.ready
    assert sel.button_label == 'Combine 2 EPUBs'
    sel.remove(0)
    assert sel.files == ['b.epub']
    sel.clear()
    assert sel.files == []


def test_selection_rejects_non_epub():
    with pytest.raises(SelectionError, match='only EPUB'):
        EpubSelection(size_fn=_sizes({})).add(['a.pdf'])


def test_selection_max_files():
    sel = EpubSelection(ApiConfig(max_files=3), size_fn=_sizes({}))
    sel.add(['a.epub', 'b.epub'])
    with pytest.raises(SelectionError, match='Maximum 3 files allowed. You can add 1 more.'):
        sel.add(['c.epub', 'd.epub'])
    assert sel.files == ['a.epub', 'b.epub']


def test_selection_max_size():
    sel = EpubSelection(ApiConfig(max_file_size=1024 * 1024), size_fn=_sizes({'big.epub': 2 * 1024 * 1024}))
    with pytest.raises(SelectionError, match='"big.epub" is too large. Maximum size is 1 MB'):
        sel.add(['ok.epub', 'big.epub'])
    assert sel.files == []


def test_format_file_size():
    assert format_file_size(0) == '0 Bytes'
    assert format_file_size(500) == '500 Bytes'
    assert format_file_size(1536) == '1.5 KB'
    assert format_file_size(52428800) == '50 MB'


def test_api_config_from_json_defaults():
    cfg = ApiConfig.from_json({'maxFiles': 5})
    assert cfg.max_files == 5
    assert cfg.max_file_size == 52428800
    assert cfg.max_file_size_mb == 50.0


def test_fetch_api_config():
    session = FakeSession(FakeResponse(json_data={'maxFiles': 4, 'maxFileSize': 1000, 'maxFileSizeMB': 0.001}))
    cfg = fetch_api_config('https://api.test/api/', session=session)
    assert cfg == ApiConfig(max_files=4, max_file_size=1000, max_file_size_mb=0.001)
    assert session.calls[0][1] == 'https://api.test/api/config'


def test_fetch_api_config_errors():
    with pytest.raises(UpstreamError, match='HTTP 503'):
        fetch_api_config('https://api.test', session=FakeSession(FakeResponse(503)))
    with pytest.raises(UpstreamError, match='Connection failed'):
        fetch_api_config('https://api.test', session=FakeSession(exc=requests.ConnectionError('refused')))


def test_combine_uploads_files(tmp_path):
    paths = []
    for name in ('one.epub', 'two.epub'):
        p = tmp_path / name
        p.write_bytes(name.encode())
        paths.append(str(p))
    session = FakeSession(FakeResponse(content=b'PK-combined'))
    assert combine_epubs('https://api.test', paths, session=session) == b'PK-combined'
    method, url, kwargs = session.calls[0]
    assert (method, url) == ('post', 'https://api.test/combine-epubs')
    assert kwargs['files'] == [
        ('epubs', ('one.epub', b'one.epub', 'application/epub+zip')),
        ('epubs', ('two.epub', b'two.epub', 'application/epub+zip')),
    ]


def test_combine_error_messages(tmp_path):
    paths = []
    for name in ('one.epub', 'two.epub'):
        p = tmp_path / name
        p.write_bytes(b'x')
        paths.append(str(p))
    cases = [
        (FakeResponse(400, json_data={'message': 'Corrupt EPUB'}), 'Corrupt EPUB'),
        (FakeResponse(400, json_data={'error': 'Too many files'}), 'Too many files'),
        (FakeResponse(500, text='boom'), 'boom'),
        (FakeResponse(502), 'HTTP 502'),
    ]
    for resp, expected in cases:
        with pytest.raises(UpstreamError, match=expected):
            combine_epubs('https://api.test', paths, session=FakeSession(resp))


def test_combine_needs_two_files():
    with pytest.raises(SelectionError):
        combine_epubs('https://api.test', ['only.epub'], session=FakeSession())
