import argparse

from corpus import DialogCorpus, MAX_EXAMPLE_LEN, VOCAB_PATH, VOCAB_SIZE, LOAD_FIRST


def main(argv=None):
    p = argparse.ArgumentParser(description="Build the dialog corpus and peek at one batch.")
    p.add_argument("samples", help="CSV file with two dialogue columns and a header row")
    p.add_argument("--vocab-size", type=int, default=VOCAB_SIZE)
    p.add_argument("--max-example-len", type=int, default=MAX_EXAMPLE_LEN)
    p.add_argument("--load-first", type=int, default=LOAD_FIRST)
    p.add_argument("--vocab-path", default=VOCAB_PATH)
    p.add_argument("--batch-size", type=int, default=4)
    args = p.parse_args(argv)

    # 1. Build (or load) the vocabulary and encode the samples
    corpus = DialogCorpus.from_csv(
        args.samples,
        vocab_size=args.vocab_size,
        max_example_len=args.max_example_len,
        load_first=args.load_first,
        vocab_path=args.vocab_path,
    )
    corpus.load()

    # 2. Grab a small batch to check the tensor conversion
    batch = corpus.batches(args.batch_size).next_batch()
    if batch is None:
        print("No examples could be built from this corpus.")
        return None

    print("\n--- Batch Shapes ---")
    print("encoder inputs: ", tuple(batch.encoder_inputs.shape))   # (max input len, batch)
    print("decoder inputs: ", tuple(batch.decoder_inputs.shape))   # (max target len - 1, batch)
    print("decoder targets:", tuple(batch.decoder_targets.shape))

    print("\n--- First Column ---")
    print("input: ", " ".join(corpus.vocab.decode(batch.encoder_inputs[:, 0])))
    print("target:", " ".join(corpus.vocab.decode(batch.decoder_targets[:, 0])))
    return batch


if __name__ == "__main__":
    main()
