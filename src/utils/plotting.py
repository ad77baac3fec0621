import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path
import logging
from typing import Dict, List
import numpy as np

logger = logging.getLogger(__name__)

# Set style
sns.set_style("whitegrid")
plt.rcParams['figure.figsize'] = (12, 6)


class Plotter:
    """Handles all plotting operations."""

    def __init__(self, config):
        """
        Initialize plotter.

        Args:
            config: Hydra configuration object
        """
        self.config = config
        self.output_dir = Path(config.paths.plots_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _save(self, fig, filename: str) -> Path:
        fig.tight_layout()
        output_path = self.output_dir / filename
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return output_path

    def plot_token_frequencies(
        self,
        token_freq: Dict[str, int],
        title: str = "Token Frequency Distribution",
        filename: str = "token_frequencies.png",
        top_n: int = 50
    ) -> Path:
        """
        Plot the most frequent tokens.

        Args:
            token_freq: Dictionary mapping tokens to frequencies
            title: Plot title
            filename: Output filename
            top_n: Number of top tokens to plot
        """
        sorted_tokens = sorted(token_freq.items(), key=lambda x: x[1], reverse=True)[:top_n]
        if not sorted_tokens:
            raise ValueError("No tokens to plot")
        tokens, freqs = zip(*sorted_tokens)

        fig, ax = plt.subplots(figsize=(14, 8))
        ax.bar(range(len(tokens)), freqs, color='steelblue', alpha=0.8)

        ax.set_xlabel('Tokens', fontsize=12, fontweight='bold')
        ax.set_ylabel('Frequency', fontsize=12, fontweight='bold')
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.set_xticks(range(len(tokens)))
        ax.set_xticklabels(tokens, rotation=45, ha='right')

        output_path = self._save(fig, filename)
        logger.info(f"Saved token frequency plot to {output_path}")
        return output_path

    def plot_latency_distribution(
        self,
        latencies: List[float],
        title: str = "Query Latency Distribution",
        filename: str = "latency_distribution.png"
    ) -> Path:
        """
        Plot latency distribution with percentiles.

        Args:
            latencies: List of latency values in milliseconds
            title: Plot title
            filename: Output filename
        """
        if not latencies:
            raise ValueError("No latencies to plot")

        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(16, 6))

        # Histogram
        ax1.hist(latencies, bins=50, color='steelblue', alpha=0.7, edgecolor='black')
        for pct, color in ((50, 'green'), (95, 'orange'), (99, 'red')):
            value = np.percentile(latencies, pct)
            ax1.axvline(value, color=color, linestyle='--', linewidth=2,
                        label=f'P{pct}: {value:.3f}ms')
        ax1.set_xlabel('Latency (ms)', fontsize=12, fontweight='bold')
        ax1.set_ylabel('Frequency', fontsize=12, fontweight='bold')
        ax1.set_title(title, fontsize=14, fontweight='bold')
        ax1.legend()

        # Box plot
        ax2.boxplot(latencies, patch_artist=True,
                    boxprops=dict(facecolor='lightblue', alpha=0.7),
                    medianprops=dict(color='red', linewidth=2))
        ax2.set_ylabel('Latency (ms)', fontsize=12, fontweight='bold')
        ax2.set_title('Latency Box Plot', fontsize=14, fontweight='bold')

        output_path = self._save(fig, filename)
        logger.info(f"Saved latency distribution plot to {output_path}")
        return output_path

    def plot_mode_comparison(
        self,
        mode_results: Dict[str, Dict[str, float]],
        title: str = "Index Mode Comparison",
        filename: str = "mode_comparison.png"
    ) -> Path:
        """
        Compare index modes side by side.

        Args:
            mode_results: Mode name -> {'key_count', 'indexing_time_seconds', 'mean_latency_ms'}
            title: Plot title
            filename: Output filename
        """
        modes = list(mode_results.keys())
        panels = [
            ('key_count', 'Lookup keys'),
            ('indexing_time_seconds', 'Indexing time (s)'),
            ('mean_latency_ms', 'Mean query latency (ms)'),
        ]

        fig, axes = plt.subplots(1, len(panels), figsize=(18, 6))
        palette = sns.color_palette("muted", len(modes))

        for ax, (metric, label) in zip(axes, panels):
            values = [mode_results[mode].get(metric, 0) for mode in modes]
            sns.barplot(x=modes, y=values, hue=modes, palette=palette, legend=False, ax=ax)
            ax.set_ylabel(label, fontsize=12, fontweight='bold')
            ax.set_xlabel('')
            for i, value in enumerate(values):
                ax.text(i, value, f'{value:,.3g}', ha='center', va='bottom', fontsize=10)

        fig.suptitle(title, fontsize=14, fontweight='bold')

        output_path = self._save(fig, filename)
        logger.info(f"Saved mode comparison to {output_path}")
        return output_path
