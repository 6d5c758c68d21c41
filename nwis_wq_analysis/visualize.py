"""Static maps and charts rendered from the published summary tables."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from nwis_wq_analysis.config import AnalysisConfig
from nwis_wq_analysis.parameters import unit_for


def _slug(text: str) -> str:
    return re.sub(r'[^0-9A-Za-z]+', '_', str(text)).strip('_').lower() or 'parameter'


class WaterQualityVisualizer:
    """Creates maps, time series and profile charts."""

    def __init__(self, config: AnalysisConfig, logger: logging.Logger):
        self.config = config
        self.logger = logger
        plt.style.use('seaborn-v0_8-whitegrid')
        sns.set_palette(config.color_palette)

    def create_all_visualizations(self, sites: pd.DataFrame, tables: dict[str, pd.DataFrame]) -> list[Path]:
        """Generate every figure; returns the written paths."""
        self.logger.info("=" * 60)
        self.logger.info("GENERATING VISUALIZATIONS")
        self.logger.info("=" * 60)

        output_dir = self.config.output_dir / "plots"
        output_dir.mkdir(parents=True, exist_ok=True)

        written: list[Path] = []
        written += self._plot_site_map(sites, output_dir)
        written += self._plot_window_mean_maps(tables.get('window_mean', pd.DataFrame()), output_dir)
        written += self._plot_time_series(tables.get('monthly_mean', pd.DataFrame()), output_dir)
        written += self._plot_vertical_profiles(tables.get('vertical_profile', pd.DataFrame()), output_dir)
        written += self._plot_nitrogen_composition(tables.get('nitrogen_composition', pd.DataFrame()), output_dir)
        written += self._plot_water_levels(tables.get('water_level_monthly', pd.DataFrame()), output_dir)

        self.logger.info(f"Visualizations saved to {output_dir}")
        return written

    def _save(self, fig, output_dir: Path, stem: str) -> Path:
        path = output_dir / f"{stem}.{self.config.figure_format}"
        fig.tight_layout()
        fig.savefig(path, dpi=self.config.figure_dpi, bbox_inches='tight')
        plt.close(fig)
        return path

    def _plot_site_map(self, sites: pd.DataFrame, output_dir: Path) -> list[Path]:
        """Point map of every site, colored by type."""
        located = sites.dropna(subset=['lat', 'lon'])
        if len(located) == 0:
            return []
        self.logger.info("  Creating site map...")

        fig, ax = plt.subplots(figsize=(9, 9))
        sns.scatterplot(data=located, x='lon', y='lat', hue='site_type', style='site_type',
                        s=70, edgecolor='black', ax=ax)
        ax.set_xlabel('Longitude')
        ax.set_ylabel('Latitude')
        ax.set_title(f'Monitoring Sites (n={len(located):,})')
        ax.set_aspect('equal', adjustable='datalim')
        return [self._save(fig, output_dir, 'site_map')]

    def _plot_window_mean_maps(self, window_mean: pd.DataFrame, output_dir: Path) -> list[Path]:
        """One point map per parameter, colored by window mean."""
        if len(window_mean) == 0:
            return []
        self.logger.info("  Creating window mean maps...")

        paths = []
        for parameter, group in window_mean.groupby('parameter'):
            # Absent values are left off the map rather than drawn as zero
            group = group.dropna(subset=['value', 'lat', 'lon'])
            if len(group) == 0:
                continue

            fig, ax = plt.subplots(figsize=(9, 9))
            points = ax.scatter(group['lon'], group['lat'], c=group['value'],
                                cmap=self.config.color_palette, s=90, edgecolors='black')
            cbar = fig.colorbar(points, ax=ax, shrink=0.8)
            cbar.set_label(f"{parameter} ({unit_for(parameter)})")
            for _, row in group.iterrows():
                ax.annotate(row['short_id'], (row['lon'], row['lat']), fontsize=7,
                            xytext=(4, 4), textcoords='offset points')
            ax.set_xlabel('Longitude')
            ax.set_ylabel('Latitude')
            ax.set_title(f"{parameter}: mean {self.config.window_start} to {self.config.window_end}")
            ax.set_aspect('equal', adjustable='datalim')
            paths.append(self._save(fig, output_dir, f"map_{_slug(parameter)}"))
        return paths

    def _plot_time_series(self, monthly: pd.DataFrame, output_dir: Path) -> list[Path]:
        """Monthly mean by site, one chart per parameter."""
        if len(monthly) == 0:
            return []
        self.logger.info("  Creating time series plots...")

        monthly = monthly.dropna(subset=['value', 'year_month']).copy()
        monthly['month'] = pd.to_datetime(monthly['year_month'], format='%Y-%m')

        paths = []
        for parameter, group in monthly.groupby('parameter'):
            fig, ax = plt.subplots(figsize=(12, 6))
            sns.lineplot(data=group.sort_values('month'), x='month', y='value',
                         hue='short_id', marker='o', ax=ax)
            ax.set_xlabel('Month')
            ax.set_ylabel(f"{parameter} ({unit_for(parameter)})")
            ax.set_title(f"{parameter}: monthly mean by site")
            ax.legend(title='Site', bbox_to_anchor=(1.02, 1), loc='upper left', fontsize=8)
            ax.tick_params(axis='x', rotation=45)
            paths.append(self._save(fig, output_dir, f"timeseries_{_slug(parameter)}"))
        return paths

    def _plot_vertical_profiles(self, profile: pd.DataFrame, output_dir: Path) -> list[Path]:
        """Value against sample altitude, one chart per parameter."""
        profile = profile.dropna(subset=['value', 'sample_altitude']) if len(profile) else profile
        if len(profile) == 0:
            return []
        self.logger.info("  Creating vertical profile plots...")

        paths = []
        for parameter, group in profile.groupby('parameter'):
            fig, ax = plt.subplots(figsize=(8, 9))
            for short_id, site in group.groupby('short_id'):
                site = site.sort_values('sample_altitude')
                ax.plot(site['value'], site['sample_altitude'], 'o-', label=short_id)
            ax.set_xlabel(f"{parameter} ({unit_for(parameter)})")
            ax.set_ylabel('Sample altitude (ft)')
            ax.set_title(f"{parameter}: vertical profile")
            ax.legend(title='Site', fontsize=8)
            paths.append(self._save(fig, output_dir, f"profile_{_slug(parameter)}"))
        return paths

    def _plot_nitrogen_composition(self, composition: pd.DataFrame, output_dir: Path) -> list[Path]:
        if len(composition) == 0:
            return []
        self.logger.info("  Creating nitrogen composition plot...")

        data = composition.sort_values('organic_n_pct').set_index('short_id')
        fig, ax = plt.subplots(figsize=(12, 6))
        data[['organic_n_pct', 'nitrite_nitrate_n_pct']].plot.bar(ax=ax, edgecolor='black', alpha=0.85)
        ax.axhline(0, color='black', linewidth=1)
        ax.set_xlabel('Site')
        ax.set_ylabel('% of total nitrogen')
        ax.set_title('Nitrogen Composition')
        ax.legend(['Organic N', 'Nitrite + nitrate N'])
        return [self._save(fig, output_dir, 'nitrogen_composition')]

    def _plot_water_levels(self, levels: pd.DataFrame, output_dir: Path) -> list[Path]:
        levels = levels.dropna(subset=['water_table_altitude']) if len(levels) else levels
        if len(levels) == 0:
            return []
        self.logger.info("  Creating water level plot...")

        levels = levels.copy()
        levels['month'] = pd.to_datetime(levels['year_month'], format='%Y-%m')
        fig, ax = plt.subplots(figsize=(12, 6))
        sns.lineplot(data=levels.sort_values('month'), x='month', y='water_table_altitude',
                     hue='short_id', marker='o', ax=ax)
        ax.set_xlabel('Month')
        ax.set_ylabel('Water-table altitude (ft)')
        ax.set_title('Monthly Mean Water-Table Altitude')
        ax.legend(title='Site', bbox_to_anchor=(1.02, 1), loc='upper left', fontsize=8)
        return [self._save(fig, output_dir, 'water_levels')]
