from __future__ import annotations

from unittest.mock import Mock, patch

from asset_engine.models.transformation_result import TransformationResult
from asset_engine.services.progress import ProgressTracker, is_tty_enabled


class TestIsTtyEnabled:
    def test_is_tty_enabled_true(self):
        with patch("sys.stdout.isatty", return_value=True):
            assert is_tty_enabled() is True

    def test_is_tty_enabled_false(self):
        with patch("sys.stdout.isatty", return_value=False):
            assert is_tty_enabled() is False


class TestProgressTracker:
    @patch("asset_engine.services.progress.tqdm")
    @patch("asset_engine.services.progress.is_tty_enabled")
    def test_disabled_without_tty(self, mock_tty, mock_tqdm):
        mock_tty.return_value = False
        with ProgressTracker(3) as tracker:
            tracker.advance()
            tracker.advance(valid=False)
        mock_tqdm.assert_not_called()
        assert tracker.enabled is False
        assert tracker.processed == 2
        assert tracker.invalid == 1

    @patch("asset_engine.services.progress.tqdm")
    @patch("asset_engine.services.progress.is_tty_enabled")
    def test_enabled_with_tty(self, mock_tty, mock_tqdm):
        mock_tty.return_value = True
        mock_pbar = Mock()
        mock_tqdm.return_value = mock_pbar

        tracker = ProgressTracker(10, description="Transforming telus")
        mock_tqdm.assert_called_once_with(
            total=10, desc="Transforming telus", unit="row", leave=True, ncols=80, ascii=True
        )
        assert tracker.enabled is True
        tracker.advance()
        tracker.advance(valid=False)
        assert mock_pbar.update.call_count == 2
        mock_pbar.set_postfix.assert_called_once_with(invalid=1)

        tracker.close()
        mock_pbar.close.assert_called_once()
        assert tracker.pbar is None
        # 二重 close は no-op
        tracker.close()
        mock_pbar.close.assert_called_once()

    @patch("asset_engine.services.progress.is_tty_enabled", return_value=False)
    def test_used_as_on_result_callback(self, _mock_tty):
        bad = TransformationResult()
        bad.add_error("IMEI is required")
        tracker = ProgressTracker(2)
        tracker(0, TransformationResult())
        tracker(1, bad)
        assert (tracker.processed, tracker.invalid) == (2, 1)
