"""CSV export of the output tables plus a short text summary."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pandas as pd

from nwis_wq_analysis.config import AnalysisConfig
from nwis_wq_analysis.parameters import parameter_table


class ReportGenerator:
    """Generates output reports."""

    def __init__(self, config: AnalysisConfig, logger: logging.Logger):
        self.config = config
        self.logger = logger

    def generate_reports(self, sites: pd.DataFrame, observations: pd.DataFrame,
                         tables: dict[str, pd.DataFrame]) -> list[Path]:
        """Write every table to CSV and the text summary."""
        self.logger.info("=" * 60)
        self.logger.info("GENERATING REPORTS")
        self.logger.info("=" * 60)

        output_dir = self.config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)

        named = {'sites': sites, 'observations': observations, 'parameters': parameter_table(), **tables}
        written = []
        for name, table in named.items():
            path = output_dir / f"{name}.csv"
            table.to_csv(path, index=False, na_rep="NA")
            self.logger.info(f"  Saved: {path.name}")
            written.append(path)

        written.append(self._generate_text_report(sites, observations, tables, output_dir))
        return written

    def _generate_text_report(self, sites: pd.DataFrame, observations: pd.DataFrame,
                              tables: dict[str, pd.DataFrame], output_dir: Path) -> Path:
        lines = [
            "=" * 80,
            "NWIS WATER QUALITY SUMMARY",
            f"Bounding box: {self.config.bbox}",
            f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            "=" * 80,
            "",
            "SITES",
            "-" * 50,
        ]
        if len(sites) > 0:
            for site_type, n in sites['site_type'].value_counts().items():
                lines.append(f"{site_type}: {n:,}")
        else:
            lines.append("No sites in bounding box")
        lines.append("")

        lines.extend(["OBSERVATIONS", "-" * 50])
        if len(observations) > 0:
            for parameter, n in observations['parameter'].value_counts().items():
                lines.append(f"{parameter}: {n:,}")
            dates = observations['date'].dropna()
            if len(dates) > 0:
                lines.append(f"Date range: {dates.min():%Y-%m-%d} to {dates.max():%Y-%m-%d}")
        else:
            lines.append("No observations")
        lines.append("")

        composition = tables.get('nitrogen_composition', pd.DataFrame())
        if len(composition) > 0:
            lines.extend([
                f"NITROGEN COMPOSITION ({self.config.window_start} to {self.config.window_end})",
                "-" * 50,
            ])
            for _, row in composition.iterrows():
                lines.append(
                    f"{row['short_id']}: organic N {row['organic_n_pct']}%, "
                    f"nitrite+nitrate N {row['nitrite_nitrate_n_pct']}%"
                )
            lines.append("")

        trends = tables.get('trends', pd.DataFrame())
        significant = trends[trends['significant']] if len(trends) > 0 else trends
        if len(significant) > 0:
            lines.extend(["SIGNIFICANT MONTHLY TRENDS", "-" * 50])
            for _, row in significant.iterrows():
                lines.append(
                    f"{row['short_id']} {row['parameter']}: {row['direction']} "
                    f"(tau={row['kendall_tau']:.2f}, p={row['p_value']:.4f})"
                )
            lines.append("")

        lines.extend(["=" * 80, "END OF REPORT", "=" * 80])

        path = output_dir / 'analysis_report.txt'
        with open(path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(lines))

        self.logger.info("  Saved: analysis_report.txt")
        return path
