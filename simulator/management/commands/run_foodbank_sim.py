# simulator/management/commands/run_foodbank_sim.py
import json
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from simulator.categories import ReferralProbabilities
from simulator.exceptions import InvalidSimulationParameters
from simulator.montecarlo import run_monte_carlo
from simulator.params import SimulationParams


class Command(BaseCommand):
    help = "Run a food bank Monte Carlo sweep and print the averaged statistics."

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, required=True, help="Days per run")
        parser.add_argument("--simulations", type=int, required=True, help="Number of independent runs")
        parser.add_argument("--restock", type=int, required=True, help="Boxes delivered per restock")
        parser.add_argument("--single", type=float, default=0.5)
        parser.add_argument("--couple", type=float, default=0.5)
        parser.add_argument("--family", type=float, default=0.5)
        parser.add_argument("--large-family", type=float, default=0.5)
        parser.add_argument("--seed", type=int, default=None)
        parser.add_argument("--start-date", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
        parser.add_argument("--corrected-referral-mapping", action="store_true")
        parser.add_argument("--json", action="store_true", help="Print the API JSON payload")

    def handle(self, *args, **opts):
        params = SimulationParams(
            number_of_days=opts["days"],
            number_of_simulations=opts["simulations"],
            restock_quantity=opts["restock"],
            referral_probabilities=ReferralProbabilities(
                single=opts["single"],
                couple=opts["couple"],
                family=opts["family"],
                large_family=opts["large_family"],
            ),
            start_date=opts["start_date"],
            corrected_referral_mapping=opts["corrected_referral_mapping"],
            seed=opts["seed"],
        )

        def _progress(done, total):
            if opts["verbosity"] >= 2:
                self.stderr.write(f"\t{done} of {total} simulations completed...")

        try:
            result = run_monte_carlo(params, progress_callback=_progress)
        except InvalidSimulationParameters as exc:
            raise CommandError(str(exc)) from exc

        if opts["json"]:
            self.stdout.write(json.dumps(result.as_json()))
            return

        self.stdout.write(self.style.SUCCESS(f"{result.simulations} simulations x {params.number_of_days} days"))
        self.stdout.write(f"  Avg unfulfilled referrals : {result.avg_number_of_unfulfilled_referrals}")
        self.stdout.write(f"  Avg deliveries per day    : {result.avg_number_of_deliveries_per_day}")
        self.stdout.write(f"  Avg expired boxes         : {result.avg_number_of_expired_boxes_of_food}")
