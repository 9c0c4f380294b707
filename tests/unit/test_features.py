import numpy as np
import pandas as pd
import pytest

from application.dataset.processing import add_log_price, back_transform

pytestmark = pytest.mark.unit


def test_add_log_price_matches_ln_and_keeps_price(raw_diamonds):
    out = add_log_price(raw_diamonds)

    assert "log_price" in out.columns and "price" in out.columns
    np.testing.assert_allclose(out["log_price"], np.log(raw_diamonds["price"]))
    np.testing.assert_allclose(np.exp(out["log_price"]), out["price"])
    # input untouched
    assert "log_price" not in raw_diamonds.columns


def test_back_transform_inverts_log():
    prices = np.array([326.0, 2401.5, 18823.0])
    np.testing.assert_allclose(back_transform(np.log(prices)), prices)


@pytest.mark.parametrize("bad", [0.0, -5.0, np.nan])
def test_add_log_price_rejects_non_positive_prices(bad):
    df = pd.DataFrame({"price": [100.0, bad, 250.0]})
    with pytest.raises(ValueError, match="strictly positive"):
        add_log_price(df)
