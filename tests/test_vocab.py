import pytest
import torch

from vocab import (
    MagicToken, PAD_token, Vocabulary, build_vocab, encode_text, load_vocab, save_vocab,
)


def test_magic_tokens_come_first():
    vocab = build_vocab([("zebra zebra", "apple")])
    assert vocab.word2id["<go>"] == MagicToken.GO == 1
    assert vocab.word2id["<eos>"] == MagicToken.EOS == 2
    assert vocab.word2id["<unknown>"] == MagicToken.UNKNOWN == 3
    assert PAD_token not in vocab.id2word


@pytest.mark.parametrize("vocab_size", [-1, 0, 1, 3, 4, 100])
def test_magic_tokens_survive_any_capacity(vocab_size):
    vocab = build_vocab([("a b c", "d e")], vocab_size)
    assert [vocab.id2word[i] for i in (1, 2, 3)] == ["<go>", "<eos>", "<unknown>"]


def test_ids_follow_descending_frequency():
    vocab = build_vocab([("b a a", "c a b")])
    assert vocab.word2id["a"] == 4
    assert vocab.word2id["b"] == 5
    assert vocab.word2id["c"] == 6


def test_ties_keep_first_seen_order():
    vocab = build_vocab([("x y", "y z")])
    assert [vocab.id2word[i] for i in (4, 5, 6)] == ["y", "x", "z"]


def test_ties_at_capacity_boundary_keep_first_seen_word():
    vocab = build_vocab([("x y", "z")], 4)
    assert vocab.word2id["x"] == 4
    assert "y" not in vocab and "z" not in vocab
    assert encode_text("x y z", vocab, 25) == [4, MagicToken.UNKNOWN, MagicToken.UNKNOWN]


def test_words_are_lowercased():
    vocab = build_vocab([("Hello HELLO", "hello")])
    assert vocab.word2id["hello"] == 4
    assert vocab.words_count == 4


def test_mappings_are_inverse_and_dense():
    vocab = build_vocab([("one two three.", "four, five!")])
    assert sorted(vocab.id2word) == list(range(1, vocab.words_count + 1))
    for word, i in vocab.word2id.items():
        assert vocab.id2word[i] == word


def test_build_is_deterministic(rows):
    first = build_vocab(rows, 12)
    second = build_vocab(rows, 12)
    assert first.word2id == second.word2id
    assert first.id2word == second.id2word


def test_capacity_limits_vocabulary():
    rows = [("a a a b b c", "d")]
    vocab = build_vocab(rows, 5)
    assert vocab.words_count == 5
    assert "c" not in vocab and "d" not in vocab
    assert encode_text("a c", vocab, 25) == [4, MagicToken.UNKNOWN]


def test_capacity_larger_than_corpus():
    vocab = build_vocab([("a a a b b c", "d")], 50)
    assert vocab.words_count == 3 + 4
    assert len(vocab) == vocab.words_count


@pytest.mark.parametrize("vocab_size", [1, 2, 3])
def test_tiny_capacity_keeps_only_magic_tokens(vocab_size):
    vocab = build_vocab([("a b", "c")], vocab_size)
    assert vocab.words_count == 3


@pytest.mark.parametrize("vocab_size", [0, -1])
def test_non_positive_capacity_is_unlimited(vocab_size):
    vocab = build_vocab([("a b", "c a")], vocab_size)
    assert vocab.words_count == 6


def test_missing_and_untokenizable_lines_are_skipped():
    vocab = build_vocab([("a b", None), (7, "c")])
    assert set(vocab.word2id) == {"<go>", "<eos>", "<unknown>", "a", "b", "c"}


def test_hi_there_scenario():
    vocab = build_vocab([("hi there.", "hello!")], -1)
    assert [vocab.word2id[w] for w in ("hi", "there", ".", "hello", "!")] == [4, 5, 6, 7, 8]


class TestEncodeText:
    @pytest.fixture
    def vocab(self):
        return build_vocab([("one two three four five six.", "hi there. how are you?")])

    def test_empty_text_is_absent(self, vocab):
        assert encode_text("", vocab, 25) is None
        assert encode_text(None, vocab, 25) is None

    def test_text_without_tokens_is_absent(self, vocab):
        assert encode_text("   <i></i> ", vocab, 25) is None

    def test_unknown_words_map_to_unknown_token(self, vocab):
        assert encode_text("One zebra", vocab, 25) == [vocab.word2id["one"], MagicToken.UNKNOWN]

    def test_long_text_is_truncated(self, vocab):
        ids = encode_text("one two three four five six", vocab, 4)
        assert ids == [vocab.word2id[w] for w in ("one", "two", "three", "four")]

    def test_stops_after_first_sentence(self, vocab):
        ids = encode_text("hi there. how are you?", vocab, 25)
        assert ids == [vocab.word2id[w] for w in ("hi", "there", ".")]

    def test_terminator_counts_toward_limit(self, vocab):
        assert encode_text("hi there.", vocab, 2) == [vocab.word2id["hi"], vocab.word2id["there"]]
        assert len(encode_text("hi there.", vocab, 3)) == 3

    def test_is_pure(self, vocab):
        before = dict(vocab.word2id)
        assert encode_text("how are you", vocab, 25) == encode_text("how are you", vocab, 25)
        assert vocab.word2id == before


def test_decode_skips_padding():
    vocab = build_vocab([("hi there.", "hello!")])
    ids = torch.tensor([0, 0, 4, 5, 99])
    assert vocab.decode(ids) == ["hi", "there", "<unknown>"]


def test_save_and_load(tmp_path):
    vocab = build_vocab([("hi there.", "hello!")])
    path = tmp_path / "cache" / "vocab.pt"
    save_vocab(vocab, str(path))
    loaded = load_vocab(str(path))
    assert loaded.word2id == vocab.word2id
    assert loaded.id2word == vocab.id2word
    assert loaded.words_count == vocab.words_count


def test_load_rejects_mismatched_magic_tokens(tmp_path):
    data = Vocabulary().to_dict()
    data["eos_token"] = 7
    path = tmp_path / "vocab.pt"
    torch.save(data, str(path))
    with pytest.raises(ValueError):
        load_vocab(str(path))
