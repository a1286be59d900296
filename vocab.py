import os
from collections import Counter
from enum import IntEnum

import torch
from tqdm import tqdm

from word_tokenizer import tokenize, TokenizationError

# Padding value used in batches. No word is ever given this id.
PAD_token = 0


class MagicToken(IntEnum):
    """Reserved ids, assigned before any corpus word and in this order."""
    GO = 1       # Start of sequence: tells the decoder to start generating
    EOS = 2      # End of sequence: tells the decoder to stop generating
    UNKNOWN = 3  # Any word dropped from (or never seen by) the vocabulary


MAGIC_WORDS = {
    MagicToken.GO: "<go>",
    MagicToken.EOS: "<eos>",
    MagicToken.UNKNOWN: "<unknown>",
}

class Vocabulary:
    """
    Two-way mapping between lowercase words and dense integer ids.

    word2id: str -> int, id2word: int -> str, with id2word[word2id[w]] == w.
    Ids start at 1; the three magic tokens always hold ids 1, 2 and 3.
    """

    def __init__(self):
        self.word2id = {}
        self.id2word = {}
        self.words_count = 0
        for token in MagicToken:
            self._add_word(MAGIC_WORDS[token])

    @property
    def go_token(self):
        return MagicToken.GO.value

    @property
    def eos_token(self):
        return MagicToken.EOS.value

    @property
    def unknown_token(self):
        return MagicToken.UNKNOWN.value

    def __len__(self):
        return self.words_count

    def __contains__(self, word):
        return word in self.word2id

    def _add_word(self, word):
        word = word.lower()
        self.words_count += 1
        self.word2id[word] = self.words_count
        self.id2word[self.words_count] = word
        return self.words_count

    def lookup(self, word):
        """Returns the id of a word, or the unknown token if it isn't in the vocab."""
        return self.word2id.get(word.lower(), self.unknown_token)

    def decode(self, ids):
        """Converts a sequence of ids back into words, skipping padding."""
        return [self.id2word.get(int(i), MAGIC_WORDS[MagicToken.UNKNOWN]) for i in ids if int(i) != PAD_token]

    def to_dict(self):
        return {
            "word2id": dict(self.word2id),
            "id2word": dict(self.id2word),
            "words_count": self.words_count,
            "go_token": self.go_token,
            "eos_token": self.eos_token,
            "unknown_token": self.unknown_token,
        }

    @classmethod
    def from_dict(cls, data):
        for token in MagicToken:
            key = f"{token.name.lower()}_token"
            if data.get(key) != token.value:
                raise ValueError(f"Saved vocabulary has {key}={data.get(key)}, expected {token.value}")

        vocab = cls.__new__(cls)
        vocab.word2id = {str(w): int(i) for w, i in data["word2id"].items()}
        vocab.id2word = {int(i): str(w) for i, w in data["id2word"].items()}
        vocab.words_count = int(data["words_count"])
        if len(vocab.word2id) != vocab.words_count or len(vocab.id2word) != vocab.words_count:
            raise ValueError("Saved vocabulary is inconsistent with its words_count")
        return vocab


def count_words(counter, sentence):
    """Adds the lowercase words of a sentence to a frequency counter."""
    counter.update(word.lower() for _, word in tokenize(sentence))


def build_vocab(rows, vocab_size=-1, show_progress=False):
    """
    Builds a frequency ranked vocabulary from (line, line) rows.

    Words are ranked by descending frequency; equal frequencies keep the order
    in which the words were first seen. With vocab_size > 0 the vocabulary stops
    growing once it holds vocab_size ids (magic tokens included).
    Lines that fail to tokenize are left out of the count.
    """
    print("-- Build vocab")
    vocab = Vocabulary()
    word_freqs = Counter()

    for row in tqdm(rows, desc="Counting words", unit="row", disable=not show_progress):
        for line in row[:2]:
            if line is None:
                continue
            try:
                count_words(word_freqs, line)
            except TokenizationError as e:
                print(f"Skipping line in vocab: {e}")

    # most_common sorts with a stable sort, so ties stay in first-seen order
    for word, _ in word_freqs.most_common():
        if vocab_size > 0 and vocab.words_count >= vocab_size:
            break
        if word in vocab:
            continue
        vocab._add_word(word)

    print(f"Counted {len(word_freqs)} unique words, kept {len(vocab)} in the vocabulary.")
    return vocab


def encode_text(text, vocab, max_len):
    """
    Converts a line of text into a list of word ids.

    Only the first sentence is kept, truncated to max_len ids; the sentence
    terminator counts toward max_len. Returns None when there is nothing to
    encode so that callers can skip the sample.
    """
    if text is None or text == "":
        return None

    words = []
    for tag, word in tokenize(text):
        words.append(vocab.lookup(word))
        if tag == "endpunct" or len(words) >= max_len:
            break

    if not words:
        return None
    return words


def tensor_from_ids(ids):
    # dtype=torch.long is required for PyTorch embedding layers
    return torch.tensor(ids, dtype=torch.long)


def save_vocab(vocab, path):
    """Writes the vocabulary to disk with torch.save."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    torch.save(vocab.to_dict(), path)


def load_vocab(path):
    """Reads a vocabulary previously written by save_vocab."""
    return Vocabulary.from_dict(torch.load(path, weights_only=True))
