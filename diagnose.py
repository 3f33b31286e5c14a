import sys
import os

# Add project root to path
sys.path.append(os.getcwd())

try:
    from tradecost.core.entities.rates import RateSchedule
    from tradecost.core.entities.trade import TradeLeg
    from tradecost.core.use_cases.pnl_resolver import valuate_leg
    from tradecost.infrastructure.cache.memory_store import InMemoryFreezeStore
    from tradecost.api.main import app
    print("✅ All imports successful.")
except Exception as e:
    print(f"❌ Import failed: {e}")
    sys.exit(1)

# Closed legs must keep their P&L when rates change
def test_freeze():
    try:
        leg = TradeLeg(side="SELL", segment="intraday", quantity=5, entry_price=200,
                       exit_price=180, is_closed=True, symbol="SBIN", opened_at="2025-01-02 09:45:00")
        store = InMemoryFreezeStore()

        before = valuate_leg(leg, RateSchedule(), store, user="diag")
        after = valuate_leg(leg, RateSchedule(brokerage_mode="PCT"), store, user="diag")

        if abs(before.pnl - 59.658) < 1e-9 and after.pnl == before.pnl and after.frozen:
            print(f"✅ Closed-leg valuation frozen at {before.pnl:.3f}.")
        else:
            print(f"❌ Freeze check failed: before={before.pnl}, after={after.pnl}, frozen={after.frozen}")
    except Exception as e:
        print(f"❌ Valuation raised exception: {e}")

if __name__ == "__main__":
    test_freeze()
