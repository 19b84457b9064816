import tempfile
from pathlib import Path
from unittest import TestCase, mock

import numpy as np
import requests

from adult_perceptron.schema import ADULT_SCHEMA, LABEL_COLUMN
from adult_perceptron.tools import dataset
from adult_perceptron.tools.dataset import download_adult_dataset, read_dataset, train_test_split

from ._toy import make_adult_frame, write_adult_csv


class ReadDatasetTests(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_reads_census_layout(self):
        src = make_adult_frame(n=50)
        path = write_adult_csv(self.tmp / "adult.txt", src)

        df = read_dataset(path)

        self.assertEqual(list(df.columns), [c.name for c in ADULT_SCHEMA])
        self.assertEqual(len(df), 50)
        self.assertEqual(df["Age"].dtype, np.float32)
        self.assertEqual(df[LABEL_COLUMN].dtype, bool)
        self.assertEqual(df[LABEL_COLUMN].tolist(), src[LABEL_COLUMN].tolist())
        # leading spaces after the separator are dropped
        self.assertFalse(df["Workclass"].str.startswith(" ").any())

    def test_without_header(self):
        path = write_adult_csv(self.tmp / "adult.txt", make_adult_frame(n=20), header=False)
        df = read_dataset(path, has_header=False)
        self.assertEqual(len(df), 20)

    def test_accepts_boolean_token_variants(self):
        header = ",".join(f"c{i}" for i in range(15))
        row = "39,State-gov,77516,Bachelors,13,Never-married,Adm-clerical,Not-in-family,White,Male,2174,0,40,United-States,{}"
        labels = ["1", "0", "true", "False", ">50K.", "<=50K."]
        path = self.tmp / "tokens.csv"
        path.write_text(header + "\n" + "\n".join(row.format(l) for l in labels) + "\n", encoding="utf-8")

        df = read_dataset(path)

        self.assertEqual(df[LABEL_COLUMN].tolist(), [True, False, True, False, True, False])

    def test_bad_label_raises(self):
        header = ",".join(f"c{i}" for i in range(15))
        row = "39,State-gov,77516,Bachelors,13,Never-married,Adm-clerical,Not-in-family,White,Male,2174,0,40,United-States,maybe"
        path = self.tmp / "bad.csv"
        path.write_text(header + "\n" + row + "\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            read_dataset(path)

    def test_unparsable_numeric_becomes_nan(self):
        header = ",".join(f"c{i}" for i in range(15))
        row = "?,State-gov,77516,Bachelors,13,Never-married,Adm-clerical,Not-in-family,White,Male,2174,0,40,United-States,0"
        path = self.tmp / "nan.csv"
        path.write_text(header + "\n" + row + "\n", encoding="utf-8")
        with self.assertLogs("adult_perceptron.tools.dataset", level="WARNING"):
            df = read_dataset(path)
        self.assertTrue(np.isnan(df["Age"].iloc[0]))

    def test_row_short_of_trailing_fields_is_rejected(self):
        header = ",".join(f"c{i}" for i in range(15))
        full = "39,State-gov,77516,Bachelors,13,Never-married,Adm-clerical,Not-in-family,White,Male,2174,0,40,United-States,maybe"
        short = "50,Private,83311,Bachelors,13,Married-civ-spouse"
        path = self.tmp / "short_row.csv"
        path.write_text(header + "\n" + full + "\n" + short + "\n", encoding="utf-8")
        with self.assertRaises(ValueError) as ctx:
            read_dataset(path)
        self.assertIn("2 non-boolean values", str(ctx.exception))

    def test_too_few_columns_raises(self):
        path = self.tmp / "short.csv"
        path.write_text("a,b,c\n1,2,3\n", encoding="utf-8")
        with self.assertRaises(ValueError) as ctx:
            read_dataset(path)
        self.assertIn("14", str(ctx.exception))


class TrainTestSplitTests(TestCase):
    def test_holds_out_requested_fraction(self):
        df = make_adult_frame(n=100)
        train, test = train_test_split(df, test_fraction=0.1, seed=1)
        self.assertEqual(len(test), 10)
        self.assertEqual(len(train), 90)
        self.assertEqual(list(train.index), list(range(90)))

    def test_seeded_split_is_repeatable(self):
        df = make_adult_frame(n=100)
        _, a = train_test_split(df, test_fraction=0.2, seed=7)
        _, b = train_test_split(df, test_fraction=0.2, seed=7)
        self.assertTrue(a.equals(b))

    def test_invalid_fraction(self):
        df = make_adult_frame(n=10)
        for frac in (0.0, 1.0, -0.5, 1.5):
            with self.subTest(frac=frac):
                with self.assertRaises(ValueError):
                    train_test_split(df, test_fraction=frac)

    def test_empty_side_raises(self):
        df = make_adult_frame(n=10).head(1)
        with self.assertRaises(ValueError):
            train_test_split(df, test_fraction=0.5)


class DownloadTests(TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _fake_response(self, chunks, error=None):
        resp = mock.MagicMock()
        resp.__enter__.return_value = resp
        resp.iter_content.return_value = chunks
        if error is not None:
            resp.raise_for_status.side_effect = error
        return resp

    def test_existing_file_is_reused(self):
        target = self.tmp / "adult.txt"
        target.write_text("cached", encoding="utf-8")
        with mock.patch.object(dataset.requests, "get") as get:
            path = download_adult_dataset(dest_dir=self.tmp)
        get.assert_not_called()
        self.assertEqual(path, target)
        self.assertEqual(path.read_text(encoding="utf-8"), "cached")

    def test_streams_body_to_target(self):
        resp = self._fake_response([b"a,b\n", b"", b"1,2\n"])
        with mock.patch.object(dataset.requests, "get", return_value=resp) as get:
            path = download_adult_dataset(dest_dir=self.tmp, url="https://example.test/adult.train")
        get.assert_called_once()
        self.assertEqual(get.call_args.args[0], "https://example.test/adult.train")
        self.assertTrue(get.call_args.kwargs["stream"])
        self.assertEqual(path.read_bytes(), b"a,b\n1,2\n")
        self.assertFalse((self.tmp / "adult.txt.part").exists())

    def test_force_redownloads(self):
        (self.tmp / "adult.txt").write_text("old", encoding="utf-8")
        resp = self._fake_response([b"new"])
        with mock.patch.object(dataset.requests, "get", return_value=resp):
            path = download_adult_dataset(dest_dir=self.tmp, force=True)
        self.assertEqual(path.read_text(encoding="utf-8"), "new")

    def test_http_error_leaves_no_file(self):
        resp = self._fake_response([b"x"], error=requests.HTTPError("404"))
        with mock.patch.object(dataset.requests, "get", return_value=resp):
            with self.assertRaises(requests.HTTPError):
                download_adult_dataset(dest_dir=self.tmp)
        self.assertFalse((self.tmp / "adult.txt").exists())
        self.assertFalse((self.tmp / "adult.txt.part").exists())
