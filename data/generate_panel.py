"""
Generate the synthetic state/region panel and save it next to this script.

Creates:
- sales.csv: one row per (state, week) with the three shocks and sales
- media.csv: one row per (state, week, channel) with spend
- modeling_frame.csv: sales joined with spend, media contribution, total sales
- regional_rollup.csv: weekly sales summed by region
- ground_truth.json: settings, state-region map and true coefficients
"""

from pathlib import Path

from panel_mmm import SimulationConfig, run_simulation, save_outputs


if __name__ == "__main__":
    print("Generating panel data...")
    cfg = SimulationConfig()
    result = run_simulation(cfg, verbose=True)

    out_dir = save_outputs(result, Path(__file__).resolve().parent)
    print(f"\nSaved outputs to {out_dir}")

    print("\nStates per region:")
    print(result.panel.assignments['region'].value_counts().sort_index())

    print("\nSales Summary:")
    print(result.sales[['national_shock', 'regional_shock', 'state_shock', 'sales']]
          .describe().round(2))

    print("\nChannel Spend Ranges:")
    for channel in cfg.channel_names:
        spend = result.media_wide[channel]
        print(f"{channel}: ${spend.min():,.0f} - ${spend.max():,.0f}")
